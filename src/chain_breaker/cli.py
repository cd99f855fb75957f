"""CLI for chain breaker.

Provides command-line interface for running a chain node and
inspecting its configuration.
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import sys

import click

from .api.serve import run_server
from .chain import build_next_hop_url
from .client import DownstreamClient
from .config import load_settings
from .outcomes import CallOutcome, Success

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """Chain Breaker - a chain node guarding its next hop with a circuit breaker."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Host to bind to")
@click.option("--port", "-p", default=3000, show_default=True, type=int, help="Port to bind to")
@click.option(
    "--log-level",
    default="info",
    show_default=True,
    type=click.Choice(["critical", "error", "warning", "info", "debug"]),
    help="uvicorn log level",
)
@click.option("--reload", is_flag=True, help="Enable auto-reload (development only)")
def serve(host: str, port: int, log_level: str, reload: bool) -> None:
    """Serve the chain endpoint.

    Configuration is read from the environment (JUMPS, INJECT_ERR, ID,
    CHAIN_SVC, BREAKER_*).
    """
    try:
        settings = load_settings()
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    logger.info("Serving %s on %s:%d", settings.instance_id, host, port)
    run_server(host=host, port=port, log_level=log_level, reload=reload)


@cli.command(name="config")
def show_config() -> None:
    """Print the configuration resolved from the environment as JSON."""
    try:
        settings = load_settings()
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(json.dumps(dataclasses.asdict(settings), indent=2))


@cli.command()
@click.argument("endpoint")
@click.option("--count", "-c", default=0, show_default=True, type=int, help="Hop count to send")
@click.option("--timeout", default=30.0, show_default=True, type=float, help="Request timeout")
def call(endpoint: str, count: int, timeout: float) -> None:
    """Send one chain request to ENDPOINT and print the response body."""
    url = build_next_hop_url(endpoint, count)
    outcome = asyncio.run(_call_async(url, timeout))
    if isinstance(outcome, Success):
        payload = outcome.payload
        click.echo(payload if isinstance(payload, str) else json.dumps(payload, indent=2))
        return
    click.echo(f"Error: {outcome.reason}", err=True)
    sys.exit(1)


async def _call_async(url: str, timeout: float) -> CallOutcome:
    """Async implementation of the call command."""
    async with DownstreamClient(timeout=timeout) as client:
        return await client(url)


def main() -> None:
    """Entry point for the chain-breaker console script."""
    cli()
