"""TCP reachability probe for the game port."""

import asyncio

from mcmonitor.core.logs import get_logger
from mcmonitor.core.models import ReachabilityResult

logger = get_logger(__name__)


class TcpProber:
    """Opens a raw TCP connection and closes it immediately.

    Resolves ``reachable=True`` on connect and ``reachable=False`` on
    timeout or connection error. ``probe`` never raises.
    """

    def __init__(self, host: str, port: int, timeout_seconds: float = 3.0) -> None:
        self.host = host
        self.port = port
        self.timeout_seconds = timeout_seconds

    async def probe(self) -> ReachabilityResult:
        """Attempt one connection to ``host:port``."""
        try:
            _reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.timeout_seconds,
            )
        except (TimeoutError, OSError) as exc:
            logger.debug(
                "Game port %s:%s unreachable: %r", self.host, self.port, exc
            )
            return ReachabilityResult(reachable=False)

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return ReachabilityResult(reachable=True)
