"""Host snapshot collector (CPU, memory, disk, uptime)."""

import platform
import socket
import sys
import time
from pathlib import Path

import psutil

from mcmonitor.core.errors import CommandError
from mcmonitor.core.logs import get_logger
from mcmonitor.core.models import (
    CpuStats,
    DiskStats,
    HostSnapshot,
    MemoryStats,
)
from mcmonitor.core.ports import CommandRunnerPort

logger = get_logger(__name__)

BYTES_PER_GIB = 1024**3
CPUINFO_PATH = Path("/proc/cpuinfo")


def parse_cpu_usage(output: str) -> float:
    """Parse the CPU command's output; anything unparsable is 0."""
    try:
        return float(output.strip())
    except ValueError:
        return 0.0


def parse_disk_usage(output: str) -> DiskStats:
    """Parse ``total used free percent`` as printed by ``df -h``.

    Missing columns fall back to ``"0G"``; an unparsable percent is 0.
    """
    parts = output.split()
    total, used, free = (parts[i] if len(parts) > i else "0G" for i in range(3))
    try:
        percent = float(parts[3].rstrip("%")) if len(parts) > 3 else 0.0
    except ValueError:
        percent = 0.0
    return DiskStats(total=total, used=used, free=free, percent=percent)


def read_cpu_model(cpuinfo: Path = CPUINFO_PATH) -> str:
    """Return the CPU model name, or ``"unknown"``."""
    try:
        for line in cpuinfo.read_text(encoding="utf-8", errors="replace").splitlines():
            key, _, value = line.partition(":")
            if key.strip() == "model name" and value.strip():
                return value.strip()
    except OSError:
        pass
    return platform.processor() or "unknown"


class HostSnapshotCollector:
    """Samples the local host for the ``system`` section of a response.

    CPU usage and disk usage come from shell commands and are only sampled
    on Linux. Elsewhere CPU usage reports ``usage_sampled=False`` and disk
    usage keeps its zero defaults.
    """

    def __init__(
        self,
        runner: CommandRunnerPort,
        cpu_command: str,
        disk_command: str,
        platform_name: str | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            runner: Executes the sampling commands.
            cpu_command: Pipeline printing CPU usage percent.
            disk_command: Pipeline printing ``total used free percent``.
            platform_name: Overrides ``sys.platform`` (for tests).
        """
        self._runner = runner
        self._cpu_command = cpu_command
        self._disk_command = disk_command
        self.platform_name = platform_name or sys.platform

    @property
    def is_linux(self) -> bool:
        return self.platform_name.startswith("linux")

    async def _cpu_usage(self) -> tuple[float, bool]:
        if not self.is_linux:
            return 0.0, False
        try:
            output = await self._runner.run(self._cpu_command)
        except CommandError as exc:
            logger.warning("Error getting CPU usage: %s", exc)
            return 0.0, False
        return parse_cpu_usage(output), True

    async def _disk_usage(self) -> DiskStats:
        if not self.is_linux:
            return DiskStats()
        try:
            output = await self._runner.run(self._disk_command)
        except CommandError as exc:
            logger.warning("Error getting disk usage: %s", exc)
            return DiskStats()
        return parse_disk_usage(output)

    def _memory(self) -> MemoryStats:
        mem = psutil.virtual_memory()
        used = mem.total - mem.available
        percent = used / mem.total * 100 if mem.total else 0.0
        return MemoryStats(
            total=f"{mem.total / BYTES_PER_GIB:.2f}",
            used=f"{used / BYTES_PER_GIB:.2f}",
            free=f"{mem.available / BYTES_PER_GIB:.2f}",
            percent=f"{percent:.2f}",
        )

    async def collect(self) -> HostSnapshot:
        """Return a fresh HostSnapshot.

        Command failures are logged and defaulted; errors reading memory or
        boot time from psutil propagate.
        """
        usage, sampled = await self._cpu_usage()
        disk = await self._disk_usage()
        return HostSnapshot(
            cpu=CpuStats(
                cores=psutil.cpu_count() or 0,
                model=read_cpu_model(),
                usage=f"{usage:.2f}",
                usage_sampled=sampled,
            ),
            memory=self._memory(),
            disk=disk,
            uptime=int(time.time() - psutil.boot_time()),
            platform=self.platform_name,
            hostname=socket.gethostname(),
        )
