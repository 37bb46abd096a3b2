"""Stats service: fan-out to the three collectors, fan-in to one envelope."""

import asyncio
import time
from collections.abc import Callable
from typing import Any

from mcmonitor.adapters.commands import SubprocessRunner
from mcmonitor.adapters.host import HostSnapshotCollector
from mcmonitor.adapters.probe import TcpProber
from mcmonitor.adapters.sources.http import HttpMetricsSource
from mcmonitor.config import MonitorConfig
from mcmonitor.core.logs import get_logger
from mcmonitor.core.models import ReachabilityResult, StatsEnvelope
from mcmonitor.core.normalize import MinecraftMetricsCollector, offline
from mcmonitor.core.ports import HostCollectorPort, ReachabilityPort

logger = get_logger(__name__)


class StatsService:
    """Assembles a StatsEnvelope per request with no shared state.

    The metrics, host and reachability branches run concurrently. A failure
    in one branch never cancels the others: the metrics branch degrades to
    the offline marker, the reachability branch to ``reachable=False``, and
    a host failure is re-raised after all branches finish.
    """

    def __init__(
        self,
        metrics: MinecraftMetricsCollector,
        host: HostCollectorPort,
        prober: ReachabilityPort,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.metrics = metrics
        self.host = host
        self.prober = prober
        self._clock = clock

    @classmethod
    def from_config(cls, config: MonitorConfig) -> "StatsService":
        """Wire the real adapters for ``config``."""
        source = HttpMetricsSource(config.metrics_url, config.fetch_timeout)
        host = HostSnapshotCollector(
            SubprocessRunner(config.command_timeout),
            cpu_command=config.cpu_command,
            disk_command=config.disk_command,
        )
        prober = TcpProber(config.remote_host, config.game_port, config.probe_timeout)
        return cls(MinecraftMetricsCollector(source), host, prober)

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def gather_stats(self) -> StatsEnvelope:
        """Run all collectors once and merge their results.

        Raises:
            Exception: Whatever the host collector raised.
        """
        minecraft, system, status = await asyncio.gather(
            self.metrics.collect(),
            self.host.collect(),
            self.prober.probe(),
            return_exceptions=True,
        )

        if isinstance(minecraft, BaseException):
            logger.error("Metrics collector failed: %r", minecraft)
            minecraft = offline(str(minecraft) or type(minecraft).__name__)
        if isinstance(status, BaseException):
            logger.error("Reachability probe failed: %r", status)
            status = ReachabilityResult(reachable=False)
        if isinstance(system, BaseException):
            raise system

        return StatsEnvelope(
            timestamp=self.now_ms(),
            minecraft=minecraft,
            system=system,
            server_status=status,
        )

    def health(self) -> dict[str, Any]:
        """Liveness payload; no upstream calls."""
        return {"status": "ok", "timestamp": self.now_ms()}
