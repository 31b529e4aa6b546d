"""
JSON-RPC Client for an EVM node.

Lightweight alternative to web3.py: uses httpx for HTTP.
Supports read-only calls, account queries, raw transaction submission
and receipt polling.
"""

from __future__ import annotations

import itertools
import time
from typing import Any, Optional

import httpx

from ..errors import NodeConnectionError, ReceiptTimeoutError, RpcError

DEFAULT_RPC_URL = "http://127.0.0.1:7545"  # Ganache


class RpcClient:
    """One HTTP connection to a node, used serially."""

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        timeout: float = 30,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._ids = itertools.count(1)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RpcClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            NodeConnectionError: If the node cannot be reached
            RpcError: If the node answers with an error
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        try:
            response = self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise RpcError(
                f"HTTP {exc.response.status_code} from {self.rpc_url} for {method}"
            ) from exc
        except httpx.TransportError as exc:
            raise NodeConnectionError(f"Cannot reach node at {self.rpc_url}: {exc}") from exc
        except ValueError as exc:
            raise RpcError(f"Malformed JSON-RPC response for {method}: {exc}") from exc

        if not isinstance(data, dict):
            raise RpcError(f"Malformed JSON-RPC response for {method}: {data!r}")

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                raise RpcError(
                    f"RPC error: {error.get('message', error)}",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcError(f"RPC error: {error}")

        return data.get("result")

    def chain_id(self) -> int:
        return int(self.call("eth_chainId", []), 16)

    def get_balance(self, address: str) -> int:
        """Balance in wei."""
        return int(self.call("eth_getBalance", [address, "latest"]), 16)

    def get_nonce(self, address: str) -> int:
        """Next nonce for address, counting pending transactions."""
        return int(self.call("eth_getTransactionCount", [address, "pending"]), 16)

    def eth_call(self, to: str, data: str) -> str:
        return self.call("eth_call", [{"to": to, "data": data}, "latest"])

    def send_raw_transaction(self, raw_tx: str) -> str:
        """
        Send a signed raw transaction.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        return self.call("eth_sendRawTransaction", [raw_tx])

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 0.5,
    ) -> dict:
        """
        Wait for a transaction receipt.

        Raises:
            ReceiptTimeoutError: If receipt not found within timeout
        """
        deadline = time.monotonic() + timeout
        while True:
            receipt = self.call("eth_getTransactionReceipt", [tx_hash])
            if receipt is not None:
                return receipt
            if time.monotonic() >= deadline:
                break
            time.sleep(poll_interval)

        raise ReceiptTimeoutError(f"Transaction {tx_hash} not mined within {timeout}s")
