"""FastAPI adapter exposing the monitor API and dashboard assets."""

from pathlib import Path

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from mcmonitor.adapters.frameworks.asgi import RequestLoggingMiddleware
from mcmonitor.config import MonitorConfig
from mcmonitor.core.encoding.jsonable import encode_envelope
from mcmonitor.core.logs import get_logger, log_exception
from mcmonitor.service import StatsService

logger = get_logger(__name__)


def create_monitor_router(service: StatsService) -> APIRouter:
    """Create a FastAPI router with /api/stats and /api/health endpoints.

    Args:
        service: Stats service answering both endpoints.

    Returns:
        APIRouter with the API endpoints configured.
    """
    router = APIRouter(prefix="/api")

    @router.get("/stats")
    async def get_stats() -> JSONResponse:
        """Return game server metrics, host stats and reachability."""
        try:
            envelope = await service.gather_stats()
            body = encode_envelope(envelope)
        except Exception as exc:
            log_exception("Error building stats response")
            return JSONResponse(status_code=500, content={"error": str(exc)})
        return JSONResponse(content=body)

    @router.get("/health")
    async def get_health() -> JSONResponse:
        """Return a liveness payload with the current timestamp."""
        return JSONResponse(content=service.health())

    return router


def create_app(
    config: MonitorConfig | None = None,
    service: StatsService | None = None,
) -> FastAPI:
    """Create the monitor application.

    Args:
        config: Monitor configuration (default: ``MonitorConfig()``).
        service: Stats service override; built from ``config`` when None.

    Returns:
        FastAPI app with the API router, request logging middleware and,
        when ``config.static_dir`` exists, the dashboard assets at ``/``.
    """
    config = config or MonitorConfig()
    service = service or StatsService.from_config(config)

    app = FastAPI(title="mcmonitor")
    app.state.config = config
    app.state.service = service
    app.include_router(create_monitor_router(service))
    app.add_middleware(RequestLoggingMiddleware)

    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found; dashboard disabled", static_dir)

    return app
