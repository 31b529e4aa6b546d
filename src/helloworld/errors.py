"""Errors raised by helloworld. Each carries the CLI exit code for its kind."""

from __future__ import annotations

from typing import Any, Optional


class HelloWorldError(RuntimeError):
    exit_code: int = 1


class ConfigurationError(HelloWorldError):
    exit_code = 2


class InterfaceError(HelloWorldError):
    exit_code = 3


class NodeConnectionError(HelloWorldError, ConnectionError):
    exit_code = 4


class RpcError(HelloWorldError):
    exit_code = 5

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


class TransactionError(RpcError):
    pass


class TransactionFailedError(TransactionError):
    """Raised in strict mode when a mined receipt reports status 0."""

    def __init__(self, tx_hash: str) -> None:
        super().__init__(f"Transaction {tx_hash} reverted")
        self.tx_hash = tx_hash


class ReceiptTimeoutError(HelloWorldError, TimeoutError):
    exit_code = 6


class DecodeError(HelloWorldError):
    exit_code = 7


class InvalidValueError(HelloWorldError, ValueError):
    exit_code = 8
