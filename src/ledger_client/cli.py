"""CLI entry point for ledger_client."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from ledger_client.client import LedgerClient
from ledger_client.config import load_config
from ledger_client.errors import CursorGapDetected, LedgerClientError
from ledger_client.models.config import ClientConfig
from ledger_client.wallet.keys import KeyMaterial


def _require_secret(cfg: ClientConfig) -> None:
    """Exit with error if no private key is configured."""
    if not cfg.private_key:
        click.echo("Error: No private key configured.", err=True)
        click.echo("Set LEDGER_CLIENT_SECRET env var or [wallet] private_key in config.", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """ledger-client - sign, submit and watch ledger transactions and events."""
    ctx.ensure_object(dict)
    cfg = load_config(config_path)
    ctx.obj["config"] = cfg

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show client configuration."""
    cfg: ClientConfig = ctx.obj["config"]
    click.echo(f"Network:    {cfg.network}")
    click.echo(f"Node URL:   {cfg.node_url}")
    click.echo(f"Chain ID:   {cfg.chain_id or '(from node)'}")
    click.echo(f"Gas:        {cfg.submission.max_gas_amount} @ {cfg.submission.gas_unit_price}")
    click.echo(f"Expiration: {cfg.submission.expiration_secs}s")
    click.echo(f"Poll:       every {cfg.events.poll_interval}s, {cfg.events.page_limit} per page")
    click.echo(f"Secret:     {'***configured***' if cfg.private_key else '(not set)'}")


@cli.command()
def keygen() -> None:
    """Generate a new key and print its address and private key."""
    with KeyMaterial.generate() as key:
        click.echo(f"Address:     {key.address.hex()}")
        click.echo(f"Public key:  {key.public_key_hex()}")
        click.echo(f"Private key: {key.export_private_key_hex()}")


@cli.command()
@click.pass_context
def address(ctx: click.Context) -> None:
    """Print the address of the configured key."""
    cfg: ClientConfig = ctx.obj["config"]
    _require_secret(cfg)
    with KeyMaterial.from_private_key_hex(cfg.private_key) as key:
        click.echo(key.address.hex())


@cli.command()
@click.argument("account")
@click.pass_context
def sequence(ctx: click.Context, account: str) -> None:
    """Query the on-chain sequence number of ACCOUNT."""
    cfg: ClientConfig = ctx.obj["config"]

    async def _sequence():
        async with LedgerClient(cfg) as client:
            return await client.sequence_number(account)

    try:
        click.echo(asyncio.run(_sequence()))
    except LedgerClientError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ── Transactions ───────────────────────────────────────


@cli.command()
@click.argument("recipient")
@click.argument("amount", type=int)
@click.option("--wait/--no-wait", default=False, help="Wait for the transaction to commit")
@click.pass_context
def transfer(ctx: click.Context, recipient: str, amount: int, wait: bool) -> None:
    """Transfer AMOUNT native coin units to RECIPIENT."""
    cfg: ClientConfig = ctx.obj["config"]
    _require_secret(cfg)

    async def _transfer():
        async with LedgerClient(cfg) as client:
            result = await client.transfer(recipient, amount)
            if not result.success:
                click.echo(f"Rejected: {result.reason.value if result.reason else '?'} {result.message}")
                return False
            click.echo(f"Submitted: {result.tx_hash} (seq {result.sequence_number})")
            if wait:
                tx = await client.wait_for_transaction(result.tx_hash)
                click.echo(f"Committed: success={tx.success} vm_status={tx.vm_status}")
                return bool(tx.success)
            return True

    try:
        ok = asyncio.run(_transfer())
    except LedgerClientError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    if not ok:
        sys.exit(1)


# ── Events ─────────────────────────────────────────────


@cli.command()
@click.argument("account")
@click.argument("event_type")
@click.option("--start-after", type=int, default=None, help="Only events after this sequence number")
@click.pass_context
def watch(ctx: click.Context, account: str, event_type: str, start_after: int | None) -> None:
    """Stream events of EVENT_TYPE emitted by ACCOUNT as JSON lines."""
    cfg: ClientConfig = ctx.obj["config"]

    async def _watch():
        async with LedgerClient(cfg) as client:
            async with await client.subscribe(account, event_type, start_after=start_after) as sub:
                async for record in sub:
                    click.echo(json.dumps({
                        "sequence_number": record.sequence_number,
                        "type": record.event_type,
                        "block_height": record.block_height,
                        "data": record.data_dict(),
                    }))

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        pass
    except CursorGapDetected as exc:
        click.echo(f"Gap: {exc}. Restart with --start-after to resume.", err=True)
        sys.exit(2)
    except LedgerClientError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
