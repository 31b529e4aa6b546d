"""
HelloWorld CLI

Talks to a Storage contract deployed on a local node (Ganache by default).

Running `helloworld` with no command reads the stored number, stores the
current time in milliseconds, and reads it back.

Commands:
  read   - Print the stored number
  write  - Store a number
  info   - Show endpoint, chain and account information
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import NoReturn, Optional

import click

from .client import ContractClient
from .config import RPC_URL_ENV, ClientConfig
from .errors import HelloWorldError


# ============ Constants ============

VERSION = "0.1.0"


# ============ Helpers ============


def _fail(exc: HelloWorldError) -> NoReturn:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(exc.exit_code)


def _connect(ctx: click.Context) -> ContractClient:
    """Build the client from the environment plus group options."""
    try:
        config = ClientConfig.from_env(overrides=ctx.obj)
        client = ContractClient(config)
    except HelloWorldError as exc:
        _fail(exc)
    ctx.call_on_close(client.close)
    return client


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="helloworld")
@click.option(
    "--rpc-url",
    envvar=RPC_URL_ENV,
    default=None,
    help="Node JSON-RPC URL (default: http://127.0.0.1:7545)",
)
@click.option("--contract", envvar="CONTRACT_ADDRESS", default=None, help="Storage contract address")
@click.option(
    "--abi",
    "abi_path",
    envvar="CONTRACT_ABI_PATH",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Contract artifact or ABI JSON (default: bundled Storage.json)",
)
@click.option("--value", type=int, default=None, help="Number to store (default: now in ms)")
@click.option("--strict", is_flag=True, help="Exit with an error if the transaction reverts")
@click.pass_context
def cli(
    ctx: click.Context,
    rpc_url: Optional[str],
    contract: Optional[str],
    abi_path: Optional[Path],
    value: Optional[int],
    strict: bool,
) -> None:
    """Store and retrieve a number on a Storage contract."""
    ctx.obj = {
        "rpc_url": rpc_url,
        "contract_address": contract,
        "abi_path": abi_path,
    }
    if ctx.invoked_subcommand is not None:
        return

    client = _connect(ctx)
    if value is None:
        value = int(time.time() * 1000)

    try:
        click.echo(f"old num: {client.read_value()}")
        receipt = client.write_value(value, strict=strict)
        if not receipt.status:
            # Reverted store: report and carry on, the second read shows the old value
            click.secho("transaction fails", fg="red")
        click.echo(f"new num: {client.read_value()}")
    except HelloWorldError as exc:
        _fail(exc)


# ============ Commands ============


@cli.command()
@click.pass_context
def read(ctx: click.Context) -> None:
    """Print the stored number."""
    client = _connect(ctx)
    try:
        click.echo(client.read_value())
    except HelloWorldError as exc:
        _fail(exc)


@cli.command()
@click.argument("value", type=int)
@click.option("--strict", is_flag=True, help="Raise instead of reporting a reverted transaction")
@click.pass_context
def write(ctx: click.Context, value: int, strict: bool) -> None:
    """Store VALUE in the contract."""
    client = _connect(ctx)
    try:
        receipt = client.write_value(value, strict=strict)
    except HelloWorldError as exc:
        _fail(exc)

    if receipt.status:
        click.secho("SUCCESS: Transaction confirmed!", fg="green")
        click.echo(f"  TX: {receipt.tx_hash}")
        click.echo(f"  Block: {receipt.block_number}")
    else:
        click.secho("FAILED: Transaction reverted", fg="red")
        click.echo(f"  TX: {receipt.tx_hash}")
        sys.exit(1)


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show endpoint, chain and account information."""
    client = _connect(ctx)
    cfg = client.config
    try:
        balance = client.balance()
    except HelloWorldError as exc:
        _fail(exc)

    rows = [
        ("Endpoint:  ", cfg.rpc_url),
        ("Chain ID:  ", str(client.chain_id)),
        ("Sender:    ", cfg.sender_address),
        ("Balance:   ", f"{balance / 1e18:.6f} ETH ({balance} wei)"),
        ("Contract:  ", cfg.contract_address),
        ("Gas:       ", f"limit {cfg.gas_limit}, price {cfg.gas_price} wei"),
    ]
    for label, text in rows:
        click.echo(click.style(f"  {label}", dim=True) + click.style(text, fg="bright_white"))


# ============ Entry Points ============


def main() -> None:
    """HelloWorld CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
