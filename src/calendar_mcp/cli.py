"""CLI for the calendar MCP gateway."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from calendar_mcp import __version__
from calendar_mcp.calendar import CalendarOperations
from calendar_mcp.check import run_connection_check
from calendar_mcp.config import ConfigError, GatewayConfig, load_config
from calendar_mcp.core.logging import configure_logging
from calendar_mcp.core.telemetry import init_telemetry
from calendar_mcp.errors import UnknownToolError
from calendar_mcp.server import build_gateway, build_runner, build_server, serve_stdio

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to calendar-mcp.toml (or the directory containing it)",
)


def _load(config_path: Path | None) -> GatewayConfig:
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        log_root=config.logging.log_root,
        service_name=config.name,
    )
    return config


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Calendar MCP gateway: calendar tools backed by local scripts."""


@cli.command()
@config_option
def serve(config_path: Path | None) -> None:
    """Start the MCP server on stdio."""
    config = _load(config_path)
    init_telemetry(config.name)
    server = build_server(build_gateway(config))
    asyncio.run(serve_stdio(server))


@cli.command("tools")
@config_option
def list_tools(config_path: Path | None) -> None:
    """Print the registered tool descriptors as JSON."""
    gateway = build_gateway(_load(config_path))
    click.echo(json.dumps(gateway.list_tools(), indent=2))


@cli.command()
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object")
@config_option
def call(name: str, raw_args: str, config_path: Path | None) -> None:
    """Dispatch a single tool call and print the result text."""
    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        raise click.UsageError(f"--args is not valid JSON: {exc}") from exc
    if not isinstance(arguments, dict):
        raise click.UsageError("--args must be a JSON object")

    gateway = build_gateway(_load(config_path))
    try:
        envelope = asyncio.run(gateway.dispatch(name, arguments))
    except UnknownToolError as exc:
        raise click.UsageError(str(exc)) from exc

    click.echo(envelope.text)
    if envelope.is_error:
        sys.exit(1)


@cli.command()
@click.option("--write", is_flag=True, help="Also create, update and delete a test event")
@config_option
def check(write: bool, config_path: Path | None) -> None:
    """Smoke-test the calendar scripts (read-only unless --write)."""
    operations = CalendarOperations(build_runner(_load(config_path)))
    results = asyncio.run(run_connection_check(operations, write=write))

    for result in results:
        status = "PASS" if result.passed else "FAIL"
        click.echo(f"{status}  {result.name}: {result.detail}")

    if not all(result.passed for result in results):
        sys.exit(1)
