"""CLI commands for querying ESI through the gateway."""

import json
import logging
import sys
from collections.abc import Callable
from typing import Any

import click
import structlog
from pydantic import BaseModel

from esigate import __version__
from esigate.esi.client import EsiClient, build_client
from esigate.fetch.errors import EsiError
from esigate.fetch.models import FetchResult
from esigate.observability.logging import configure_logging
from esigate.settings.app import get_settings


logger = structlog.get_logger()

LOOKUPS: dict[str, Callable[[EsiClient, int], FetchResult[Any]]] = {
    "character": lambda c, i: c.character.get_character_info_with_cache(i),
    "corporation": lambda c, i: c.corporation.get_corporation_info_with_cache(i),
    "alliance": lambda c, i: c.alliance.get_alliance_info_with_cache(i),
    "system": lambda c, i: c.universe.get_system_info_with_cache(i),
    "station": lambda c, i: c.universe.get_station_info_with_cache(i),
}


def _echo_model(model: BaseModel, json_output: bool) -> None:
    if json_output:
        click.echo(model.model_dump_json(indent=2))
        return
    for key, value in model.model_dump(exclude_none=True).items():
        click.echo(f"  {key}: {value}")


def _run(command: str, action: Callable[[EsiClient], None]) -> None:
    """Run an action against a settings-built client, exiting 1 on ESI errors."""
    log = logger.bind(component="cli", command=command)
    with build_client(get_settings()) as client:
        try:
            action(client)
        except EsiError as e:
            log.error("command_failed", error=str(e), status_code=e.status_code)
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines.")
def cli(verbose: bool, json_logs: bool) -> None:
    """ESI gateway CLI."""
    level = logging.DEBUG if verbose else logging.WARNING
    configure_logging(level=level, json_format=json_logs)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def status(json_output: bool) -> None:
    """Show the game server status and the current error budget."""

    def action(client: EsiClient) -> None:
        result = client.status.get_server_status_with_cache()
        limits = client.get_error_limits()
        if json_output:
            output = {
                "status": result.data.model_dump(mode="json"),
                "cache": result.cache.model_dump(mode="json"),
                "error_limits": limits.model_dump(mode="json"),
            }
            click.echo(json.dumps(output, indent=2))
            return
        click.echo("Server Status")
        click.echo("=" * 40)
        _echo_model(result.data, json_output=False)
        click.echo(f"  Error budget remaining: {limits.remain}")

    _run("status", action)


@cli.command()
@click.argument("resource", type=click.Choice(sorted(LOOKUPS)))
@click.argument("resource_id", type=int)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def lookup(resource: str, resource_id: int, json_output: bool) -> None:
    """Look up a public RESOURCE by RESOURCE_ID."""

    def action(client: EsiClient) -> None:
        result = LOOKUPS[resource](client, resource_id)
        if not json_output:
            click.echo(f"{resource.title()} {resource_id}")
        _echo_model(result.data, json_output)

    _run("lookup", action)


if __name__ == "__main__":
    cli()
