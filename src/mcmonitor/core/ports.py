"""Port interfaces for the monitor's I/O collaborators.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations,
so tests can substitute fakes for the remote server and the host OS.
"""

from typing import Protocol, runtime_checkable

from mcmonitor.core.models import HostSnapshot, ReachabilityResult


@runtime_checkable
class MetricsSourcePort(Protocol):
    """Port for fetching raw exposition text.

    Examples: HttpMetricsSource.
    """

    async def fetch(self) -> str:
        """Fetch the current metrics body.

        Raises:
            Any exception on network error, timeout or non-success status.
        """
        ...


@runtime_checkable
class CommandRunnerPort(Protocol):
    """Port for running OS sampling commands."""

    async def run(self, command: str) -> str:
        """Run ``command`` and return its standard output.

        Raises:
            CommandError: If the command fails or times out.
        """
        ...


@runtime_checkable
class HostCollectorPort(Protocol):
    """Port for sampling the local host."""

    async def collect(self) -> HostSnapshot:
        """Return a fresh HostSnapshot."""
        ...


@runtime_checkable
class ReachabilityPort(Protocol):
    """Port for checking whether the game port accepts connections."""

    async def probe(self) -> ReachabilityResult:
        """Resolve reachability; never raises."""
        ...
