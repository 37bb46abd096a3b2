"""Core domain models for monitor snapshots."""

import math
from dataclasses import dataclass
from typing import Any


class MetricTable(dict[str, float]):
    """Flat mapping from metric key to value, built fresh per parse.

    Keys are bare metric names or names decorated with label-derived
    suffixes (see ``mcmonitor.core.exposition``).
    """

    def lookup(self, key: str, default: float) -> float:
        """Return the value stored under ``key``, or ``default``.

        A key that is absent or holds NaN counts as missing. Zero is a real
        value and is returned as-is.

        Args:
            key: Metric key (e.g., "jvm_memory_bytes_used_heap").
            default: Fallback value when the key is missing.

        Returns:
            The stored value or the fallback.
        """
        value = self.get(key)
        if value is None or math.isnan(value):
            return default
        return value


@dataclass(frozen=True)
class CpuStats:
    """Host CPU summary.

    Attributes:
        cores: Logical core count.
        model: CPU model string.
        usage: Usage percent formatted to two decimals.
        usage_sampled: False when no real measurement was taken.
    """

    cores: int
    model: str
    usage: str = "0.00"
    usage_sampled: bool = False


@dataclass(frozen=True)
class MemoryStats:
    """Host memory in GiB (two-decimal strings) plus used percent."""

    total: str
    used: str
    free: str
    percent: str


@dataclass(frozen=True)
class DiskStats:
    """Root filesystem usage as reported by the OS."""

    total: str = "0G"
    used: str = "0G"
    free: str = "0G"
    percent: float = 0.0


@dataclass(frozen=True)
class HostSnapshot:
    """Point-in-time read of the local host."""

    cpu: CpuStats
    memory: MemoryStats
    disk: DiskStats
    uptime: int
    platform: str
    hostname: str


@dataclass(frozen=True)
class ReachabilityResult:
    """Outcome of a raw TCP connect to the game port."""

    reachable: bool


@dataclass(frozen=True)
class StatsEnvelope:
    """Response for one stats request.

    Attributes:
        timestamp: Epoch milliseconds when the envelope was assembled.
        minecraft: Normalized snapshot, or the offline marker.
        system: Host snapshot.
        server_status: Reachability of the game port.
    """

    timestamp: int
    minecraft: dict[str, Any]
    system: HostSnapshot
    server_status: ReachabilityResult
