"""CLI entry point for the pi_claimer daemon."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime, timezone

import click

from pi_claimer.config import load_config, validate_config
from pi_claimer.daemon import run_daemon
from pi_claimer.errors import ClaimerError, ConfigError, InvalidPhrase, LedgerQueryError
from pi_claimer.keys import derive
from pi_claimer.models.config import ClaimerConfig
from pi_claimer.models.records import ClaimableBalance
from pi_claimer.stellar.ledger import HorizonLedger
from pi_claimer.stellar.predicates import is_claimable, unlocks_at
from pi_claimer.stellar.scanner import HorizonBalanceScanner


def _fail(message: str, hint: str | None = None) -> None:
    click.echo(f"Error: {message}", err=True)
    if hint:
        click.echo(hint, err=True)
    sys.exit(1)


def _load_valid(ctx: click.Context) -> ClaimerConfig:
    """Load config and exit with a diagnostic if it cannot start a daemon."""
    try:
        cfg = load_config(ctx.obj["config_path"])
        validate_config(cfg)
    except ConfigError as exc:
        _fail(str(exc), "Set the values in the environment or the config TOML file.")
    return cfg


def _derive_claimant(cfg: ClaimerConfig):
    try:
        return derive(cfg.claimant_phrase, cfg.derivation_path, label="CLAIMANT_PHRASE")
    except InvalidPhrase as exc:
        _fail(str(exc))


def _mask(value: str) -> str:
    return "***configured***" if value else "(not set)"


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """pi_claimer - sponsored claim-and-send daemon for Pi Network."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Daemon ─────────────────────────────────────────────


@cli.command()
@click.option("--once", is_flag=True, help="Run a single cycle and exit")
@click.pass_context
def run(ctx: click.Context, once: bool) -> None:
    """Start the claim daemon."""
    cfg = _load_valid(ctx)
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())

    click.echo(f"Starting pi_claimer (schedule: {cfg.schedule.value}, delay: {cfg.cycle_delay}s)")
    try:
        asyncio.run(run_daemon(cfg, max_cycles=1 if once else None))
    except InvalidPhrase as exc:
        _fail(str(exc))


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the resolved configuration (secrets masked)."""
    cfg = load_config(ctx.obj["config_path"])
    click.echo(f"Horizon:      {cfg.horizon_url}")
    click.echo(f"Network:      {cfg.network_passphrase}")
    click.echo(f"Claimant:     {_mask(cfg.claimant_phrase)}")
    click.echo(f"Sponsor:      {_mask(cfg.sponsor_phrase)}")
    click.echo(f"Destination:  {cfg.destination_address or '(not set)'}")
    click.echo(f"Fee bid:      {cfg.fee_multiplier}x base fee")
    click.echo(f"Tx timeout:   {cfg.tx_timeout}s")
    click.echo(f"Schedule:     {cfg.schedule.value} ({cfg.cycle_delay}s)")
    click.echo(f"Telegram:     {'enabled' if cfg.notify.bot_token and cfg.notify.chat_id else 'disabled'}")
    try:
        validate_config(cfg)
    except ConfigError as exc:
        click.echo(f"Config:       INVALID - {exc}")
    else:
        click.echo("Config:       OK")


@cli.command()
@click.pass_context
def address(ctx: click.Context) -> None:
    """Derive and print the claimant and sponsor addresses."""
    cfg = _load_valid(ctx)
    try:
        claimant = derive(cfg.claimant_phrase, cfg.derivation_path, label="CLAIMANT_PHRASE")
        sponsor = derive(cfg.sponsor_phrase, cfg.derivation_path, label="SPONSOR_PHRASE")
    except InvalidPhrase as exc:
        _fail(str(exc))
    click.echo(f"Claimant:     {claimant.public_key}")
    click.echo(f"Sponsor:      {sponsor.public_key}")
    click.echo(f"Destination:  {cfg.destination_address}")


@cli.command()
@click.option("--all", "show_all", is_flag=True, help="Include locked and non-native balances")
@click.pass_context
def balances(ctx: click.Context, show_all: bool) -> None:
    """List the claimant's claimable balances."""
    cfg = _load_valid(ctx)
    claimant = _derive_claimant(cfg)

    async def _scan() -> list[ClaimableBalance]:
        ledger = HorizonLedger(cfg.horizon_url)
        try:
            scanner = HorizonBalanceScanner(ledger, cfg.page_size, skip_locked=not show_all)
            return await scanner.scan(claimant.public_key)
        finally:
            await ledger.close()

    try:
        found = asyncio.run(_scan())
    except LedgerQueryError as exc:
        _fail(str(exc))

    click.echo(f"Claimant: {claimant.public_key}")
    if not found:
        click.echo("No claimable balances.")
        return

    now = datetime.now(timezone.utc)
    for balance in found:
        predicate = balance.predicate_for(claimant.public_key)
        try:
            state = "claimable" if is_claimable(predicate, now) else "locked"
        except ValueError:
            state = "unknown"
        unlock = unlocks_at(predicate)
        click.echo(f"  {balance.balance_id}")
        click.echo(f"    amount: {balance.amount}  asset: {balance.asset}  state: {state}")
        if unlock is not None:
            click.echo(f"    unlocks: {unlock.isoformat()}")


def main() -> None:
    try:
        cli()
    except ClaimerError as exc:
        _fail(str(exc))


if __name__ == "__main__":
    main()
