"""
CLI — entry point for the DNS checker.

Commands:
    dnschecker run           — poll forever (default)
    dnschecker check         — run one cycle and report the result
    dnschecker show-config   — print effective settings, secrets masked
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click
import httpx
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dnschecker import __version__
from dnschecker.checker import Checker, build_checker
from dnschecker.config import ConfigError, Settings, load_settings
from dnschecker.logs import configure_logging
from dnschecker.models import CycleOutcome, CycleResult
from dnschecker.resolver import DnsLookupError
from dnschecker.scheduler import Scheduler

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

EXIT_MATCH = 0
EXIT_MISMATCH = 1
EXIT_FAILED = 2


def _load(ctx: click.Context) -> Settings:
    try:
        settings = load_settings(ctx.obj.get("config_file"))
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    configure_logging(settings.log_level, console=err_console)
    return settings


def _clients(settings: Settings) -> tuple[httpx.AsyncClient, httpx.AsyncClient]:
    # routers usually serve self-signed certificates, Telegram never does
    router_client = httpx.AsyncClient(
        verify=settings.verify_tls, timeout=settings.request_timeout
    )
    bot_client = httpx.AsyncClient(timeout=settings.request_timeout)
    return router_client, bot_client


def _build(settings: Settings, router_client, bot_client) -> Checker:
    try:
        return build_checker(settings, router_client, bot_client)
    except DnsLookupError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML config file (environment variables take precedence)",
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, config_file: str | None) -> None:
    """Alert via Telegram when DNS no longer points at the router's WAN IP."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


# ---------------------------------------------------------------------------
# Polling loop
# ---------------------------------------------------------------------------


async def _serve(settings: Settings) -> None:
    router_client, bot_client = _clients(settings)
    async with router_client, bot_client:
        checker = _build(settings, router_client, bot_client)
        scheduler = Scheduler(
            checker,
            interval=settings.check_interval,
            heartbeat_interval=settings.heartbeat_interval,
        )
        scheduler.install_signal_handlers()
        await scheduler.run()


@main.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Compare WAN IP and DNS on a fixed interval until interrupted."""
    settings = _load(ctx)
    try:
        asyncio.run(_serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")


# ---------------------------------------------------------------------------
# Single check
# ---------------------------------------------------------------------------


async def _check_once(settings: Settings, notify: bool) -> CycleResult:
    router_client, bot_client = _clients(settings)
    async with router_client, bot_client:
        checker = _build(settings, router_client, bot_client)
        return await checker.run_cycle(notify=notify)


def _exit_code(result: CycleResult) -> int:
    if result.outcome == CycleOutcome.MATCH:
        return EXIT_MATCH
    if result.mismatch:
        return EXIT_MISMATCH
    return EXIT_FAILED


@main.command()
@click.option("--notify/--no-notify", default=False, help="Send the Telegram alert on mismatch")
@click.pass_context
def check(ctx: click.Context, notify: bool) -> None:
    """Run one check cycle. Exit 0 on match, 1 on mismatch, 2 on failure."""
    settings = _load(ctx)
    result = asyncio.run(_check_once(settings, notify))

    table = Table(title=f"DNS check: {settings.dns_hostname}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Outcome", result.outcome.value)
    table.add_row("WAN IP", str(result.wan.ip) if result.wan else "-")
    table.add_row("Interface", result.wan.interface if result.wan else "-")
    table.add_row("DNS", result.resolved.as_text() if result.resolved else "-")
    if result.error:
        table.add_row("Error", f"[red]{escape(result.error)}[/red]")
    console.print(table)

    sys.exit(_exit_code(result))


@main.command("show-config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the effective settings with secrets masked."""
    settings = _load(ctx)
    console.print_json(data=settings.redacted())
