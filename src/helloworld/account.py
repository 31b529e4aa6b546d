"""
ECDSA / secp256k1 key handling.

The signing key is read from the PRIVATE_KEY environment variable,
optionally populated from a .env file in the working directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount

from .errors import ConfigurationError

DEFAULT_ENV = Path(".env")


def load_env(env_path: Optional[Path] = None) -> None:
    """Populate os.environ from a .env file without overriding set variables."""
    env_path = env_path or DEFAULT_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load private key from .env file or environment.

    Returns:
        0x-prefixed hex private key

    Raises:
        ConfigurationError: If PRIVATE_KEY is not set
    """
    load_env(env_path)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ConfigurationError(
            f"PRIVATE_KEY not found. Set it in the environment or in {env_path or DEFAULT_ENV}"
        )

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def get_account(private_key: str) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    Raises:
        ConfigurationError: If the key is not a valid secp256k1 key
    """
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"Invalid private key: {exc}") from exc


def get_address(private_key: str) -> str:
    """0x-prefixed checksummed address for a private key."""
    return get_account(private_key).address
