#!/usr/bin/env python3
"""CLI entry point for the Kraken dollar-cost-averaging bot.

Sub-commands:

1. **buy** — spend the configured amount on a BTC market order:
       python cli.py buy --config config.json

2. **quote** — show the ask price and what an amount would buy:
       python cli.py quote --amount 2500

3. **ping** — test connectivity to the Kraken REST API.
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from dca.app import build_client, run
from dca.client import BTC_USD_PAIR, KrakenClient
from dca.config import CONFIG_ENV_VAR, AppConfig, load_config
from dca.errors import DCAError, InvalidAuthError, OrderTooSmallError
from dca.logging_config import setup_logging
from dca.models import BuildInfo, OrderResult
from dca.validators import compute_volume, format_volume, validate_amount

# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------

load_dotenv()
console = Console()


def _load_config(path: str | None) -> AppConfig:
    try:
        return load_config(path or os.getenv(CONFIG_ENV_VAR))
    except DCAError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        sys.exit(1)


def _amount(raw) -> int:
    try:
        return validate_amount(raw)
    except DCAError as exc:
        console.print(f"[bold red]Validation error:[/] {exc}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _print_purchase_summary(config: AppConfig) -> None:
    """Pretty-print the purchase request before sending."""
    table = Table(title="Purchase Request Summary", show_header=False, border_style="cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Pair", BTC_USD_PAIR)
    table.add_row("Side", "[green]BUY[/]")
    table.add_row("Type", "MARKET")
    table.add_row("Amount", f"${config.order_amount_in_cents / 100:,.2f}")
    table.add_row("Query settlement", "yes" if config.query_order_info else "no")
    console.print()
    console.print(table)


def _print_order_result(result: OrderResult) -> None:
    """Pretty-print the placement and settlement of an order."""
    table = Table(title="Order Result", show_header=False, border_style="green")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Transaction ID", result.placement.transaction_id)
    table.add_row("Description", result.placement.description)
    table.add_row("Requested volume", format_volume(result.volume))
    if result.info is not None:
        table.add_row("Price", f"{result.info.price:,.2f}")
        table.add_row("Cost", f"{result.info.cost:,.2f}")
        table.add_row("Fee", f"{result.info.fee:,.4f}")
        table.add_row("Volume purchased", format_volume(result.info.volume_purchased))
    console.print()
    console.print(table)


# ---------------------------------------------------------------------------
# CLI sub-commands
# ---------------------------------------------------------------------------


def cmd_buy(args: argparse.Namespace, build_info: BuildInfo) -> None:
    """Handle the ``buy`` sub-command."""
    config = _load_config(args.config)
    if args.amount is not None:
        config = replace(config, order_amount_in_cents=_amount(args.amount))

    _print_purchase_summary(config)

    if not args.yes and not Confirm.ask("\n[bold]Submit this order?[/]", default=False):
        console.print("[yellow]Order cancelled by user.[/]")
        return

    try:
        result = run(config, build_info, client=build_client(config))
    except (OrderTooSmallError, InvalidAuthError) as exc:
        console.print(f"\n[bold red]Kraken rejected the order:[/] {exc}")
        sys.exit(1)
    except DCAError as exc:
        console.print(f"\n[bold red]Order failed:[/] {exc}")
        sys.exit(1)

    _print_order_result(result)
    console.print(Panel("[bold green]Order submitted successfully![/]", border_style="green"))


def cmd_quote(args: argparse.Namespace, _build_info: BuildInfo) -> None:
    """Handle the ``quote`` sub-command: public ticker only."""
    amount = _amount(args.amount)
    client = KrakenClient()
    try:
        quote = client.fetch_ask_price()
        volume = compute_volume(amount, quote)
    except DCAError as exc:
        console.print(f"[bold red]Quote failed:[/] {exc}")
        sys.exit(1)
    console.print(
        f"[bold]{BTC_USD_PAIR}[/] ask {quote:,.2f}: "
        f"${amount / 100:,.2f} buys [green]{format_volume(volume)}[/] BTC"
    )


def cmd_ping(_args: argparse.Namespace, _build_info: BuildInfo) -> None:
    """Handle the ``ping`` sub-command: test API connectivity."""
    client = KrakenClient()
    try:
        client.ping()
        console.print("[bold green]Kraken API is reachable.[/]")
    except DCAError as exc:
        console.print(f"[bold red]Ping failed:[/] {exc}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="dca",
        description="Kraken DCA bot: buy a fixed dollar amount of BTC at market.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands")

    # --- buy ---
    p_buy = sub.add_parser("buy", help="Place the configured market buy")
    p_buy.add_argument("--config", "-c", default=None, help=f"Config file path (default: ${CONFIG_ENV_VAR})")
    p_buy.add_argument("--amount", "-a", default=None, help="Override the amount, in US cents")
    p_buy.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    p_buy.set_defaults(func=cmd_buy)

    # --- quote ---
    p_quote = sub.add_parser("quote", help="Show the volume an amount would buy")
    p_quote.add_argument("--amount", "-a", required=True, help="Amount in US cents")
    p_quote.set_defaults(func=cmd_quote)

    # --- ping ---
    p_ping = sub.add_parser("ping", help="Test API connectivity")
    p_ping.set_defaults(func=cmd_ping)

    return parser


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    setup_logging()
    args.func(args, BuildInfo.current())


if __name__ == "__main__":
    main()
