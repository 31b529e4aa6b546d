__all__ = [
    # Client
    "ContractClient",
    "ClientConfig",
    "TxReceipt",
    # Errors
    "HelloWorldError",
    "ConfigurationError",
    "InterfaceError",
    "NodeConnectionError",
    "RpcError",
    "TransactionError",
    "TransactionFailedError",
    "ReceiptTimeoutError",
    "DecodeError",
    "InvalidValueError",
    # ABI
    "load_abi",
    "storage_abi",
    # Identity
    "get_address",
    "load_private_key",
]

from .account import get_address, load_private_key
from .chain.abi import load_abi, storage_abi
from .client import ContractClient
from .config import ClientConfig
from .errors import (
    ConfigurationError,
    DecodeError,
    HelloWorldError,
    InterfaceError,
    InvalidValueError,
    NodeConnectionError,
    ReceiptTimeoutError,
    RpcError,
    TransactionError,
    TransactionFailedError,
)
from .models import TxReceipt
