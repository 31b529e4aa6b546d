"""
Transaction Builder - Build, sign, and send contract transactions.

Uses eth-account for signing and the httpx-based RpcClient for sending.
Transactions are legacy (gasPrice) EIP-155 transactions, which Ganache
accepts with a zero gas price.
"""

from __future__ import annotations

import re
from typing import Any

from eth_hash.auto import keccak

from ..account import get_account
from ..errors import RpcError, TransactionError
from ..models import TxReceipt
from .rpc import RpcClient

DEFAULT_GAS_LIMIT = 1_000_000

_ADDRESS = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format.

    eth-account requires checksummed addresses in transaction fields.
    """
    if not isinstance(address, str) or not _ADDRESS.match(address):
        raise ValueError(f"Not a 20-byte hex address: {address!r}")
    addr = address.lower().replace("0x", "")
    addr_hash = keccak(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def build_transaction(
    rpc: RpcClient,
    sender: str,
    to: str,
    data: str,
    chain_id: int,
    gas_limit: int = DEFAULT_GAS_LIMIT,
    gas_price: int = 0,
    value: int = 0,
) -> dict:
    """
    Build a contract call transaction (unsigned).

    Args:
        rpc: Node connection, used for the nonce
        sender: Address the transaction is sent from
        to: 0x-prefixed contract address
        data: ABI-encoded calldata
        chain_id: EIP-155 chain id
        gas_limit: Gas limit
        gas_price: Gas price in wei
        value: ETH value in wei (default: 0)

    Raises:
        TransactionError: If the node rejects the nonce query
    """
    try:
        nonce = rpc.get_nonce(sender)
    except RpcError as exc:
        raise TransactionError(exc.message, code=exc.code, data=exc.data) from exc

    return {
        "to": to_checksum_address(to),
        "data": data,
        "value": value,
        "nonce": nonce,
        "gas": gas_limit,
        "gasPrice": gas_price,
        "chainId": chain_id,
    }


def sign_transaction(tx: dict, private_key: str) -> str:
    """Sign a transaction and return the 0x-prefixed raw bytes."""
    signed = get_account(private_key).sign_transaction(tx)
    return "0x" + bytes(signed.raw_transaction).hex()


def send_transaction(
    rpc: RpcClient,
    tx: dict,
    private_key: str,
    timeout: float = 120,
    poll_interval: float = 0.5,
) -> TxReceipt:
    """
    Sign a transaction, send it and wait until it is mined.

    Returns:
        Receipt of the mined transaction. A reverted transaction is
        returned with status False, not raised.

    Raises:
        TransactionError: If the node rejects the transaction
        ReceiptTimeoutError: If the transaction is not mined within timeout
    """
    raw_tx = sign_transaction(tx, private_key)

    try:
        tx_hash = rpc.send_raw_transaction(raw_tx)
    except RpcError as exc:
        raise TransactionError(exc.message, code=exc.code, data=exc.data) from exc

    receipt: dict[str, Any] = rpc.wait_for_receipt(
        tx_hash, timeout=timeout, poll_interval=poll_interval
    )
    return TxReceipt.from_rpc(tx_hash, receipt)
