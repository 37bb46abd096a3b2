"""Normalization of a parsed MetricTable into the dashboard snapshot.

Every output field reads one named key from the table with a literal
fallback. Direct reads are listed in ``FIELD_SOURCES``; derived fields
(memory, GC, file descriptors, uptime) are computed from the keys in
``DERIVED_SOURCES``. The snapshot is always fully populated.
"""

import math
import time
from collections.abc import Callable
from typing import Any

from mcmonitor.core.exposition import parse_exposition
from mcmonitor.core.logs import get_logger, log_exception
from mcmonitor.core.models import MetricTable
from mcmonitor.core.ports import MetricsSourcePort

logger = get_logger(__name__)

BYTES_PER_GIB = 1024**3

# output path -> (metric key, fallback)
FIELD_SOURCES: dict[str, tuple[str, float]] = {
    "tps": ("minecraft_tps", 20),
    "players.online": ("minecraft_players_online_total", 0),
    "players.max": ("minecraft_players_max", 20),
    "world.entities": ("minecraft_entities_total", 0),
    "world.chunks": ("minecraft_loaded_chunks_total", 0),
    "world.tickTime": ("minecraft_mspt_mean", 0),
    "performance.mspt.min": ("minecraft_mspt_min", 0),
    "performance.mspt.mean": ("minecraft_mspt_mean", 0),
    "performance.mspt.max": ("minecraft_mspt_max", 0),
    "jvm.threads.current": ("jvm_threads_current", 0),
    "jvm.threads.peak": ("jvm_threads_peak", 0),
    "jvm.threads.deadlocked": ("jvm_threads_deadlocked", 0),
    "jvm.threads.states.runnable": ("jvm_threads_state_RUNNABLE", 0),
    "jvm.threads.states.waiting": ("jvm_threads_state_WAITING", 0),
    "jvm.threads.states.timedWaiting": ("jvm_threads_state_TIMED_WAITING", 0),
    "jvm.threads.states.blocked": ("jvm_threads_state_BLOCKED", 0),
    "jvm.classesLoaded": ("jvm_classes_currently_loaded", 0),
    "connections.statusPings": ("minecraft_handshakes_total_status", 0),
    "connections.logins": ("minecraft_handshakes_total_login", 0),
}

DERIVED_SOURCES: dict[str, tuple[str, float]] = {
    "heap_used": ("jvm_memory_bytes_used_heap", 0),
    "heap_max": ("jvm_memory_bytes_max_heap", 0),
    "start_time": ("process_start_time_seconds", 0),
    "open_fds": ("process_open_fds", 0),
    "max_fds": ("process_max_fds", 1),
}

# output bucket -> metric key suffix
DIMENSIONS: dict[str, str] = {
    "overworld": "overworld",
    "nether": "the_nether",
    "end": "the_end",
}

DIMENSION_FIELDS: dict[str, str] = {
    "players": "minecraft_players_online",
    "chunks": "minecraft_loaded_chunks",
    "totalChunks": "minecraft_total_loaded_chunks",
}

# output key -> gc label value
GC_GENERATIONS: dict[str, str] = {
    "youngGen": "G1 Young Generation",
    "concurrent": "G1 Concurrent GC",
    "oldGen": "G1 Old Generation",
}


def _fixed(value: float) -> str:
    return f"{value:.2f}"


def _gib(value: float) -> str:
    return _fixed(value / BYTES_PER_GIB)


def _set_path(target: dict[str, Any], path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    for part in parents:
        target = target.setdefault(part, {})
    target[leaf] = value


def _derived(table: MetricTable, name: str) -> float:
    key, default = DERIVED_SOURCES[name]
    return table.lookup(key, default)


def memory_fields(table: MetricTable) -> dict[str, str]:
    """Heap usage in GiB as display-ready strings."""
    used = _derived(table, "heap_used")
    maximum = _derived(table, "heap_max")
    free = _gib(maximum - used) if maximum > 0 else _fixed(0)
    return {"used": _gib(used), "max": _gib(maximum), "free": free}


def gc_fields(table: MetricTable) -> dict[str, Any]:
    """Per-generation collection counts and times plus totals."""
    gc: dict[str, Any] = {}
    total_count = 0.0
    total_time = 0.0
    for output, generation in GC_GENERATIONS.items():
        count = table.lookup(f"jvm_gc_collection_seconds_count_{generation}", 0)
        seconds = table.lookup(f"jvm_gc_collection_seconds_sum_{generation}", 0)
        gc[output] = {"collections": count, "timeSeconds": _fixed(seconds)}
        total_count += count
        total_time += seconds
    gc["totalCollections"] = total_count
    gc["totalTimeSeconds"] = _fixed(total_time)
    return gc


def file_descriptor_fields(table: MetricTable) -> dict[str, Any]:
    """Open/max descriptors with percent used; max never divides by zero."""
    open_fds = _derived(table, "open_fds")
    max_fds = _derived(table, "max_fds") or 1
    return {
        "open": open_fds,
        "max": max_fds,
        "percentUsed": _fixed(open_fds / max_fds * 100),
    }


def dimension_fields(table: MetricTable) -> dict[str, dict[str, float]]:
    """Players and chunk counts for each fixed world partition."""
    return {
        bucket: {
            field: table.lookup(f"{prefix}_{suffix}", 0)
            for field, prefix in DIMENSION_FIELDS.items()
        }
        for bucket, suffix in DIMENSIONS.items()
    }


def uptime_seconds(table: MetricTable, now: float) -> int:
    """Seconds since process start, or 0 when the start time is unknown."""
    started = _derived(table, "start_time")
    if not started or not math.isfinite(started):
        return 0
    return math.floor(now - started)


def normalize(table: MetricTable, now: float | None = None) -> dict[str, Any]:
    """Build the online snapshot from a parsed MetricTable.

    Args:
        table: Output of ``parse_exposition``.
        now: Current Unix time in seconds (default: ``time.time()``).

    Returns:
        Fully populated snapshot dict with ``online=True``.
    """
    if now is None:
        now = time.time()

    snapshot: dict[str, Any] = {"online": True}
    for path, (key, default) in FIELD_SOURCES.items():
        _set_path(snapshot, path, table.lookup(key, default))

    snapshot["memory"] = memory_fields(table)
    snapshot["jvm"]["gc"] = gc_fields(table)
    snapshot["system"] = {"fileDescriptors": file_descriptor_fields(table)}
    snapshot["dimensions"] = dimension_fields(table)
    snapshot["uptime"] = uptime_seconds(table, now)
    snapshot["rawMetrics"] = dict(table)
    return snapshot


def offline(message: str) -> dict[str, Any]:
    """Marker returned instead of a snapshot when the fetch failed."""
    return {"online": False, "error": message}


class MinecraftMetricsCollector:
    """Fetches, parses and normalizes the game server's metrics.

    Any failure while fetching or normalizing is logged and turned into the
    offline marker; ``collect`` never raises.
    """

    def __init__(
        self,
        source: MetricsSourcePort,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = source
        self._clock = clock

    async def collect(self) -> dict[str, Any]:
        """Return the online snapshot or the offline marker."""
        try:
            body = await self._source.fetch()
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("Error fetching game server metrics: %s", message)
            return offline(message)
        try:
            return normalize(parse_exposition(body), now=self._clock())
        except Exception as exc:
            log_exception("Error normalizing game server metrics")
            return offline(str(exc) or type(exc).__name__)
