#!/usr/bin/env python3
"""
Command line entry point for vcli.

Sends Varnish management-port invalidations from a shell:
- `flush` one or more URLs on every configured server
- `flush-all` for a whole host
- `test` the connection against the first configured server
- `show-config` to inspect the effective settings

Options not given on the command line fall back to `VCLI_*` environment
variables (or a `.env` file).
"""

import asyncio
import sys

import click
import orjson
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vcli.client import VarnishInvalidator
from vcli.config import VCLIEnvSettings
from vcli.core.broadcast import BroadcastResult
from vcli.core.config import InvalidationSettings
from vcli.core.logging import configure_logging

console = Console()


def setup_logging(verbose: bool = False, diagnostics: bool = False) -> None:
    configure_logging(
        "DEBUG" if verbose else "WARNING",
        diagnostics=diagnostics,
        colorize=sys.stderr.isatty(),
    )


def build_settings(overrides: dict[str, object]) -> InvalidationSettings:
    env = VCLIEnvSettings()
    raw = env.model_dump()
    raw.update({key: value for key, value in overrides.items() if value is not None})
    return InvalidationSettings.from_raw(**raw)


def result_to_dict(result: BroadcastResult) -> dict[str, object]:
    return {
        "overall_ok": result.overall_ok,
        "last_detail": result.last_detail,
        "endpoints": [
            {"endpoint": str(endpoint), "ok": outcome.ok, "detail": outcome.detail}
            for endpoint, outcome in result.per_endpoint
        ],
    }


def display_result(title: str, result: BroadcastResult, output: str) -> None:
    if output == "json":
        click.echo(orjson.dumps(result_to_dict(result), option=orjson.OPT_INDENT_2).decode())
        return

    table = Table(title=title)
    table.add_column("Endpoint", style="cyan")
    table.add_column("Status")
    table.add_column("Detail")
    for endpoint, outcome in result.per_endpoint:
        status = "[green]OK[/green]" if outcome.ok else "[red]FAIL[/red]"
        table.add_row(str(endpoint), status, escape(outcome.detail))
    console.print(table)


def make_invalidator(ctx: click.Context) -> VarnishInvalidator:
    return VarnishInvalidator(ctx.obj["settings"], concurrent=ctx.obj["concurrent"])


output_option = click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--servers", "-s", help='Management endpoints, e.g. "127.0.0.1:6082 10.0.0.5:6082"')
@click.option("--key", "-k", "control_key", help="Control key (varnishd -S secret)")
@click.option("--timeout", "-t", type=int, help="Timeout in seconds (minimum 1)")
@click.option(
    "--method",
    "-m",
    type=click.Choice(["BAN", "PURGE"], case_sensitive=False),
    help="CLI command to send",
)
@click.option("--debug/--no-debug", default=None, help="Emit one diagnostic line per attempt")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Append diagnostic lines here")
@click.option("--concurrent", is_flag=True, help="Contact all servers at the same time")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    servers: str | None,
    control_key: str | None,
    timeout: int | None,
    method: str | None,
    debug: bool | None,
    log_file: str | None,
    concurrent: bool,
) -> None:
    """
    Varnish CLI invalidation tool.

    Issues ban/purge commands over the Varnish management port using the
    control key, falling back from PURGE to BAN where PURGE is unsupported.
    """
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings = build_settings(
        {
            "servers": servers,
            "control_key": control_key,
            "timeout": timeout,
            "method": method,
            "debug": debug,
            "log_file": log_file,
        }
    )
    setup_logging(verbose, diagnostics=settings.debug)
    ctx.obj["concurrent"] = concurrent


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@output_option
@click.pass_context
def flush(ctx: click.Context, urls: tuple[str, ...], output: str) -> None:
    """Invalidate the given URLs on every configured server."""

    async def _flush() -> bool:
        invalidator = make_invalidator(ctx)
        all_ok = True
        for url in urls:
            result = await invalidator.flush_url(url)
            if result is None:
                logger.error("Nothing to do for {} (disabled, invalid URL or no servers)", url)
                all_ok = False
                continue
            display_result(url, result, output)
            all_ok = all_ok and result.overall_ok
        return all_ok

    if not asyncio.run(_flush()):
        sys.exit(1)


@cli.command("flush-all")
@click.argument("home_url")
@output_option
@click.pass_context
def flush_all(ctx: click.Context, home_url: str, output: str) -> None:
    """Invalidate every URL on the host of HOME_URL."""
    result = asyncio.run(make_invalidator(ctx).flush_all(home_url))
    if result is None:
        console.print("[yellow]Nothing to do (disabled, invalid URL or no servers).[/yellow]")
        sys.exit(1)
    display_result(home_url, result, output)
    if not result.overall_ok:
        sys.exit(1)


@cli.command()
@click.argument("home_url")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def test(ctx: click.Context, home_url: str, as_json: bool) -> None:
    """Run a small invalidation of / on the first configured server."""
    result = asyncio.run(make_invalidator(ctx).test_connection(home_url))
    if as_json:
        click.echo(orjson.dumps(result.to_dict()).decode())
    else:
        style = "green" if result.success else "red"
        console.print(f"[{style}]{result.message}[/{style}]")
        if result.detail:
            console.print(result.detail, markup=False)
    if not result.success:
        sys.exit(1)


@cli.command("show-config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective settings (control key masked)."""
    settings: InvalidationSettings = ctx.obj["settings"]
    table = Table(title="vcli settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("enabled", str(settings.enabled))
    table.add_row("servers", settings.servers or "(none)")
    table.add_row("control key", "set" if settings.control_key else "(empty)")
    table.add_row("timeout", f"{settings.timeout}s")
    table.add_row("method", settings.command_kind.value)
    table.add_row("debug", str(settings.debug))
    table.add_row("log file", str(settings.log_file or "-"))
    console.print(table)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
