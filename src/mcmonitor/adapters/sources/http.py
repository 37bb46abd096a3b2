"""HTTP metrics source backed by httpx."""

import asyncio

import httpx


class HttpMetricsSource:
    """Fetches exposition text with a fresh ``httpx.AsyncClient`` per call.

    Example:
        ```python
        source = HttpMetricsSource("http://127.0.0.1:25585/metrics", 5.0)
        body = await source.fetch()
        ```
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            url: Full URL of the metrics endpoint.
            timeout_seconds: Bound on the whole request, from connect to the
                last body byte.
            transport: Optional transport override (e.g. httpx.MockTransport).
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def fetch(self) -> str:
        """Return the response body.

        Raises:
            httpx.HTTPError: On connection errors, phase timeouts and non-2xx
                status.
            TimeoutError: If the whole request outlasts ``timeout_seconds``.
        """
        try:
            return await asyncio.wait_for(self._get(), timeout=self.timeout_seconds)
        except TimeoutError:
            raise TimeoutError(
                f"metrics request timed out after {self.timeout_seconds}s"
            ) from None

    async def _get(self) -> str:
        # httpx timeouts apply per phase; wait_for in fetch bounds the total
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self._transport
        ) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            return response.text
