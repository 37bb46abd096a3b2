"""mcmonitor - game server and host metrics for a dashboard."""

from mcmonitor.config import MonitorConfig, load_config
from mcmonitor.core.errors import CommandError, ConfigError, MonitorError
from mcmonitor.core.exposition import iter_samples, parse_exposition
from mcmonitor.core.logs import get_logger
from mcmonitor.core.models import (
    CpuStats,
    DiskStats,
    HostSnapshot,
    MemoryStats,
    MetricTable,
    ReachabilityResult,
    StatsEnvelope,
)
from mcmonitor.core.normalize import MinecraftMetricsCollector, normalize, offline

__all__ = [
    # Config
    "MonitorConfig",
    "load_config",
    # Errors
    "CommandError",
    "ConfigError",
    "MonitorError",
    # Parsing and normalization
    "MinecraftMetricsCollector",
    "iter_samples",
    "normalize",
    "offline",
    "parse_exposition",
    # Models
    "CpuStats",
    "DiskStats",
    "HostSnapshot",
    "MemoryStats",
    "MetricTable",
    "ReachabilityResult",
    "StatsEnvelope",
    # Logging
    "get_logger",
]
