"""
Client configuration.

A ClientConfig is built once at startup, usually with ClientConfig.from_env(),
and injected into ContractClient.  Nothing here is mutated afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .account import get_address, load_env, load_private_key
from .chain.abi import ABI, BUNDLED_ARTIFACT, load_abi, validate_abi
from .chain.rpc import DEFAULT_RPC_URL
from .chain.tx import DEFAULT_GAS_LIMIT, to_checksum_address
from .errors import ConfigurationError

RPC_URL_ENV = "HELLOWORLD_RPC_URL"


@dataclass(frozen=True)
class ClientConfig:
    """
    Connection settings for a ContractClient.

    Attributes:
        rpc_url: Node endpoint, e.g. http://127.0.0.1:7545
        private_key: 0x-prefixed hex key used to sign transactions
        sender_address: Address transactions are sent from
        contract_address: Address of the deployed contract
        abi: Contract interface description
        gas_limit: Gas limit for write transactions
        gas_price: Gas price in wei (0 on a Ganache test network)
        chain_id: EIP-155 chain id; queried from the node when None
    """
    rpc_url: str
    private_key: str = field(repr=False)
    sender_address: str
    contract_address: str
    abi: ABI = field(repr=False)
    gas_limit: int = DEFAULT_GAS_LIMIT
    gas_price: int = 0
    chain_id: Optional[int] = None
    receipt_timeout: float = 120
    poll_interval: float = 0.5
    request_timeout: float = 30
    store_function: str = "store"
    retrieve_function: str = "retrieve"

    @classmethod
    def create(
        cls,
        private_key: str,
        contract_address: str,
        rpc_url: str = DEFAULT_RPC_URL,
        sender_address: Optional[str] = None,
        abi: Optional[ABI] = None,
        abi_path: Optional[Path] = None,
        **options: Any,
    ) -> "ClientConfig":
        """
        Build a validated config.

        The sender defaults to the key's address; the ABI defaults to the
        bundled Storage artifact.

        Raises:
            ConfigurationError: On a bad key, address, or a key/sender mismatch
            InterfaceError: If the ABI cannot be loaded
        """
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        key_address = get_address(private_key)

        try:
            contract_address = to_checksum_address(contract_address)
            sender = to_checksum_address(sender_address or key_address)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        if sender != key_address:
            raise ConfigurationError(
                f"Sender {sender} does not match the signing key address {key_address}"
            )

        if abi is None:
            abi = load_abi(abi_path or BUNDLED_ARTIFACT)
        else:
            abi = validate_abi(abi)

        return cls(
            rpc_url=rpc_url,
            private_key=private_key,
            sender_address=sender,
            contract_address=contract_address,
            abi=abi,
            **options,
        )

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> "ClientConfig":
        """
        Build a config from environment variables (and a .env file).

        Args:
            env_path: .env file to load (default: ./.env)
            overrides: Values that take precedence over the environment,
                       e.g. from CLI options; None entries are ignored

        Raises:
            ConfigurationError: If a required variable is missing or invalid
        """
        load_env(env_path)
        overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

        private_key = overrides.pop("private_key", None) or load_private_key(env_path)

        contract_address = overrides.pop("contract_address", None) or os.environ.get(
            "CONTRACT_ADDRESS"
        )
        if not contract_address:
            raise ConfigurationError(
                "CONTRACT_ADDRESS not set. Deploy the Storage contract and export its address."
            )

        abi_path = overrides.pop("abi_path", None) or os.environ.get("CONTRACT_ABI_PATH")

        options: dict[str, Any] = {
            "rpc_url": os.environ.get(RPC_URL_ENV, DEFAULT_RPC_URL),
            "sender_address": os.environ.get("SENDER_ADDRESS") or None,
            "gas_limit": _env_number("GAS_LIMIT", int, DEFAULT_GAS_LIMIT),
            "gas_price": _env_number("GAS_PRICE", int, 0),
            "chain_id": _env_number("CHAIN_ID", int, None),
            "receipt_timeout": _env_number("RECEIPT_TIMEOUT", float, 120),
            "poll_interval": _env_number("POLL_INTERVAL", float, 0.5),
        }
        options.update(overrides)

        return cls.create(
            private_key=private_key,
            contract_address=contract_address,
            abi_path=Path(abi_path) if abi_path else None,
            **options,
        )


def _env_number(name: str, kind: type, default: Any) -> Any:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw, 0) if kind is int else kind(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
