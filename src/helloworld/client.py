"""
ContractClient - Read and write a single integer held by a Storage contract.

write_value() sends a signed store(uint256) transaction and waits for it
to be mined; read_value() performs a free eth_call to retrieve().
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from .chain.abi import (
    decode_result,
    encode_call,
    find_function,
    input_types,
    integer_bounds,
    is_integer_type,
    output_types,
    validate_abi,
)
from .chain.rpc import RpcClient
from .chain.tx import build_transaction, send_transaction
from .config import ClientConfig
from .errors import InterfaceError, InvalidValueError, TransactionFailedError
from .models import TxReceipt


class ContractClient:
    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Bind to the contract and query the node for its chain id.

        Args:
            config: Connection settings
            transport: Custom httpx transport (tests use httpx.MockTransport)

        Raises:
            InterfaceError: If the ABI lacks a usable store/retrieve pair
            NodeConnectionError: If the node cannot be reached
        """
        self.config = config
        self._value_type = self._check_interface()

        self.rpc = RpcClient(
            config.rpc_url, timeout=config.request_timeout, transport=transport
        )
        try:
            node_chain_id = self.rpc.chain_id()
        except Exception:
            self.rpc.close()
            raise
        self.chain_id = config.chain_id if config.chain_id is not None else node_chain_id

    def _check_interface(self) -> str:
        abi = validate_abi(self.config.abi)
        store = find_function(abi, self.config.store_function)
        retrieve = find_function(abi, self.config.retrieve_function)

        store_inputs = input_types(store)
        if len(store_inputs) != 1 or not is_integer_type(store_inputs[0]):
            raise InterfaceError(
                f"{self.config.store_function} must take exactly one integer argument, "
                f"got ({', '.join(store_inputs)})"
            )

        retrieve_outputs = output_types(retrieve)
        if input_types(retrieve) or len(retrieve_outputs) != 1 or not is_integer_type(
            retrieve_outputs[0]
        ):
            raise InterfaceError(
                f"{self.config.retrieve_function} must take no arguments and return one integer"
            )

        return store_inputs[0]

    def close(self) -> None:
        self.rpc.close()

    def __enter__(self) -> ContractClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def check_value(self, value: Any) -> int:
        """
        Reject values the store function cannot accept.

        Raises:
            InvalidValueError: If value is not an int within the ABI type's range
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidValueError(
                f"{self.config.store_function} expects an integer, got {type(value).__name__}"
            )
        low, high = integer_bounds(self._value_type)
        if not low <= value <= high:
            raise InvalidValueError(
                f"{value} is outside the {self._value_type} range [{low}, {high}]"
            )
        return value

    def write_value(self, value: int, strict: bool = False) -> TxReceipt:
        """
        Store value on-chain and wait for the transaction to be mined.

        Args:
            value: Integer to store
            strict: Raise TransactionFailedError when the receipt status is 0

        Returns:
            Receipt of the mined transaction; check receipt.status unless strict

        Raises:
            InvalidValueError: Before any request, if value is out of range
            TransactionError: If the node rejects the transaction
            ReceiptTimeoutError: If mining does not finish within receipt_timeout
        """
        value = self.check_value(value)
        cfg = self.config

        calldata = encode_call(cfg.abi, cfg.store_function, [value])
        tx = build_transaction(
            self.rpc,
            sender=cfg.sender_address,
            to=cfg.contract_address,
            data=calldata,
            chain_id=self.chain_id,
            gas_limit=cfg.gas_limit,
            gas_price=cfg.gas_price,
        )
        receipt = send_transaction(
            self.rpc,
            tx,
            cfg.private_key,
            timeout=cfg.receipt_timeout,
            poll_interval=cfg.poll_interval,
        )

        if strict and not receipt.status:
            raise TransactionFailedError(receipt.tx_hash)
        return receipt

    def read_value(self) -> int:
        """
        Read the stored value (eth_call, no transaction).

        Raises:
            NodeConnectionError: If the node cannot be reached
            DecodeError: If the return data does not decode as an integer
        """
        cfg = self.config
        calldata = encode_call(cfg.abi, cfg.retrieve_function, [])
        result = self.rpc.eth_call(cfg.contract_address, calldata)
        return decode_result(cfg.abi, cfg.retrieve_function, result)

    def balance(self) -> int:
        """Sender balance in wei."""
        return self.rpc.get_balance(self.config.sender_address)
