"""Command line entry point."""

import asyncio
import json
import sys

import click
import uvicorn

from mcmonitor.adapters.frameworks.fastapi import create_app
from mcmonitor.adapters.logging import configure_logging
from mcmonitor.config import MonitorConfig, load_config
from mcmonitor.core.encoding.jsonable import encode_envelope, to_jsonable
from mcmonitor.core.errors import ConfigError
from mcmonitor.core.exposition import parse_exposition
from mcmonitor.core.logs import get_logger
from mcmonitor.service import StatsService

logger = get_logger(__name__)

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON config file with camelCase keys (remoteHost, metricsPort, ...).",
)


def _load(config_path: str | None) -> MonitorConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc


@click.group()
def main() -> None:
    """Game server and host metrics for the dashboard."""


@main.command()
@config_option
@click.option("--host", default=None, help="Interface to bind (overrides listenHost).")
@click.option("--port", type=int, default=None, help="Port to bind (overrides listenPort).")
@click.option("--log-level", default=None, help="Log level (overrides logLevel).")
def serve(
    config_path: str | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
) -> None:
    """Run the HTTP API and dashboard."""
    config = _load(config_path)
    overrides = {
        key: value
        for key, value in (
            ("listenHost", host),
            ("listenPort", port),
            ("logLevel", log_level),
        )
        if value is not None
    }
    if overrides:
        config = MonitorConfig.from_mapping(overrides, base=config)

    configure_logging(config.log_level, json_lines=config.log_json)
    app = create_app(config)

    logger.info(
        "Monitor running at http://%s:%s", config.listen_host, config.listen_port
    )
    logger.info("Monitoring server: %s:%s", config.remote_host, config.game_port)
    logger.info("Metrics endpoint: %s", config.metrics_url)
    uvicorn.run(
        app,
        host=config.listen_host,
        port=config.listen_port,
        log_level=config.log_level.lower(),
    )


@main.command()
@config_option
def snapshot(config_path: str | None) -> None:
    """Collect one stats envelope and print it as JSON."""
    config = _load(config_path)
    configure_logging(config.log_level, json_lines=config.log_json)
    service = StatsService.from_config(config)
    envelope = asyncio.run(service.gather_stats())
    click.echo(json.dumps(encode_envelope(envelope), indent=2))


@main.command()
@click.argument("source", type=click.File("r"), default="-")
def parse(source) -> None:
    """Parse exposition text from SOURCE (or stdin) and print the table."""
    table = parse_exposition(source.read())
    click.echo(json.dumps(to_jsonable(dict(table)), indent=2, sort_keys=True))


if __name__ == "__main__":
    sys.exit(main())
