"""Monitor configuration.

The remote host, ports and timeouts are passed into each component at
construction time. Values come from defaults, an optional JSON file
(camelCase keys) and ``MCMONITOR_*`` environment variables, in that order
of precedence (environment wins).
"""

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from mcmonitor.core.errors import ConfigError

DEFAULT_CPU_COMMAND = (
    "top -bn1 | grep 'Cpu(s)' | sed 's/.*, *\\([0-9.]*\\)%* id.*/\\1/'"
    " | awk '{print 100 - $1}'"
)
DEFAULT_DISK_COMMAND = "df -h / | tail -1 | awk '{print $2,$3,$4,$5}'"

ENV_PREFIX = "MCMONITOR_"

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class MonitorConfig:
    """Settings for one monitor process.

    Attributes:
        remote_host: Address of the game server.
        metrics_port: Port of the exporter's ``/metrics`` endpoint.
        game_port: Game protocol port probed for reachability.
        fetch_timeout_ms: Bound on the metrics HTTP request.
        probe_timeout_ms: Bound on the TCP reachability probe.
        listen_host: Interface the HTTP API binds to.
        listen_port: Port the HTTP API binds to.
        static_dir: Directory of dashboard assets served at ``/``.
        cpu_command: Shell pipeline printing CPU usage percent (Linux).
        disk_command: Shell pipeline printing ``total used free percent``.
        command_timeout_ms: Bound on each sampling command.
        log_level: Level for the ``mcmonitor`` logger.
        log_json: Emit NDJSON log lines instead of text.
    """

    remote_host: str = "127.0.0.1"
    metrics_port: int = 25585
    game_port: int = 25565
    fetch_timeout_ms: int = 5000
    probe_timeout_ms: int = 3000
    listen_host: str = "0.0.0.0"
    listen_port: int = 3333
    static_dir: str = "public"
    cpu_command: str = DEFAULT_CPU_COMMAND
    disk_command: str = DEFAULT_DISK_COMMAND
    command_timeout_ms: int = 5000
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def metrics_url(self) -> str:
        return f"http://{self.remote_host}:{self.metrics_port}/metrics"

    @property
    def fetch_timeout(self) -> float:
        return self.fetch_timeout_ms / 1000

    @property
    def probe_timeout(self) -> float:
        return self.probe_timeout_ms / 1000

    @property
    def command_timeout(self) -> float:
        return self.command_timeout_ms / 1000

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Any], base: "MonitorConfig | None" = None
    ) -> "MonitorConfig":
        """Build a config from camelCase keys (e.g. ``remoteHost``).

        Args:
            mapping: Parsed configuration document.
            base: Config providing values for keys not in ``mapping``.

        Raises:
            ConfigError: On unknown keys or values of the wrong type.
        """
        known = {_camel(f.name): f.name for f in fields(cls)}
        changes: dict[str, Any] = {}
        for key, value in mapping.items():
            if key not in known:
                raise ConfigError(f"Unknown configuration key: {key}")
            name = known[key]
            changes[name] = _coerce(name, value)
        return replace(base or cls(), **changes)

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, base: "MonitorConfig | None" = None
    ) -> "MonitorConfig":
        """Build a config from ``MCMONITOR_*`` variables.

        ``MCMONITOR_REMOTE_HOST`` sets ``remote_host``, and so on.
        """
        environ = os.environ if environ is None else environ
        changes: dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is not None:
                changes[f.name] = _coerce(f.name, raw)
        return replace(base or cls(), **changes)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _coerce(name: str, value: Any) -> Any:
    """Convert ``value`` to the type of field ``name``."""
    kind = type(getattr(MonitorConfig(), name))
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS:
            return True
        if isinstance(value, str) and value.strip().lower() in _FALSE_STRINGS:
            return False
        raise ConfigError(f"{name}: expected a boolean, got {value!r}")
    if kind is int:
        if isinstance(value, bool):
            raise ConfigError(f"{name}: expected an integer, got {value!r}")
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{name}: expected an integer, got {value!r}") from None
        if number < 0:
            raise ConfigError(f"{name}: must not be negative, got {number}")
        return number
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{name}: expected a non-empty string, got {value!r}")
    return value


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> MonitorConfig:
    """Load configuration from an optional JSON file plus the environment.

    Args:
        path: JSON file with camelCase keys, or None.
        environ: Environment mapping (default: ``os.environ``).

    Raises:
        ConfigError: If the file is unreadable, not a JSON object, or holds
            invalid values.
    """
    config = MonitorConfig()
    if path is not None:
        try:
            document = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        if not isinstance(document, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        config = MonitorConfig.from_mapping(document, base=config)
    return MonitorConfig.from_env(environ, base=config)
