"""Shared test fixtures for all test modules."""

import logging

import httpx
import pytest

from mcmonitor.core.normalize import MinecraftMetricsCollector
from mcmonitor.service import StatsService
from tests.fakes import (
    FIXED_NOW,
    FULL_METRICS_BODY,
    FakeHostCollector,
    FakeProber,
    StaticSource,
)


@pytest.fixture
def full_metrics_body() -> str:
    """Exposition body containing every key the normalizer reads."""
    return FULL_METRICS_BODY


@pytest.fixture
def stats_service_factory():
    """Factory fixture building a StatsService from fakes.

    Usage:
        service = stats_service_factory(source=StaticSource(error=...))
    """

    def _factory(
        source: StaticSource | None = None,
        host: FakeHostCollector | None = None,
        prober: FakeProber | None = None,
        clock=lambda: FIXED_NOW,
    ) -> StatsService:
        collector = MinecraftMetricsCollector(
            source or StaticSource(FULL_METRICS_BODY), clock=clock
        )
        return StatsService(
            collector, host or FakeHostCollector(), prober or FakeProber(), clock=clock
        )

    return _factory


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/api/health")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client


@pytest.fixture
def basic_asgi_app():
    """Basic ASGI app fixture that returns 200 OK."""
    from mcmonitor.adapters.frameworks.asgi import Receive, Scope, Send

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({"type": "http.response.body", "body": b"OK"})

    return app


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts."""
    from mcmonitor.adapters.frameworks.asgi import Scope

    def _scope(method: str = "GET", path: str = "/test") -> Scope:
        return {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [],
        }

    return _scope


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture."""

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        responses.append(message)

    return send, responses


@pytest.fixture(autouse=True)
def _reset_mcmonitor_logging():
    """Remove handlers installed by configure_logging after each test."""
    yield
    logger = logging.getLogger("mcmonitor")
    for handler in list(logger.handlers):
        if getattr(handler, "_mcmonitor_handler", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
