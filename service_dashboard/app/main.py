"""Dashboard service main application."""

import time
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from .admin.registry import AdminCommandRegistry, create_default_registry
from .api.admin import router as admin_router
from .api.routes import router as api_router
from .polling.poller import ModelPoller
from .runtime.metrics import get_metrics_collector
from .upstream.client import UpstreamClient
from libs.catalog import SelectionMode, create_normalizer
from libs.common.config import DashboardConfig
from libs.common.logging import configure_logging
from libs.common.tracing import configure_tracing

logger = structlog.get_logger("dashboard_service")

SERVICE_NAME = "dashboard-service"

# Top-level aliases for API routes; sub-paths are carried over.
PATH_ALIASES = (
    ("/chat", "/api/categories/chat"),
    ("/image", "/api/categories/image"),
    ("/audio", "/api/categories/audio"),
    ("/embeddings", "/api/embedding"),
)


def rewrite_path(path: str) -> str:
    """Map an alias path onto its API route, leaving other paths untouched."""
    for source, destination in PATH_ALIASES:
        if path == source or path.startswith(source + "/"):
            return destination + path[len(source):]
    return path


class PathAliasMiddleware:
    """ASGI middleware applying ``PATH_ALIASES`` before routing."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            path = rewrite_path(scope["path"])
            if path != scope["path"]:
                scope = dict(scope, path=path, raw_path=path.encode("utf-8"))
        await self.app(scope, receive, send)


def create_app(
    config: Optional[DashboardConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    admin_registry: Optional[AdminCommandRegistry] = None
) -> FastAPI:
    """Build the dashboard application.

    Parameters
    - config: service configuration (read from the environment by default)
    - transport: httpx transport for upstream calls, used by tests
    - admin_registry: admin commands (simulated defaults when omitted)
    """
    config = config or DashboardConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        configure_logging(SERVICE_NAME, config.mb_log_level, config.mb_log_format)
        logger.info("Starting dashboard service", upstream_url=config.mb_upstream_url)

        app.state.metrics_collector = get_metrics_collector(SERVICE_NAME)
        app.state.upstream_client = UpstreamClient(
            url=config.mb_upstream_url,
            transport=transport,
            metrics_collector=app.state.metrics_collector
        )
        await app.state.upstream_client.initialize()

        app.state.poller = ModelPoller(
            client=app.state.upstream_client,
            normalizer=create_normalizer(SelectionMode.FASTEST),
            interval=config.mb_poll_interval_seconds,
            metrics_collector=app.state.metrics_collector
        )
        if config.mb_poll_enabled:
            app.state.poller.start()
        else:
            logger.info("Background polling disabled via configuration")

        logger.info("Dashboard service started successfully")

        yield

        logger.info("Shutting down dashboard service")
        await app.state.poller.stop()
        await app.state.upstream_client.cleanup()
        logger.info("Dashboard service shutdown complete")

    app = FastAPI(
        title="ModelBoard",
        description="Normalized, ranked view of the upstream AI model listing",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.config = config
    app.state.admin_registry = admin_registry or create_default_registry()

    if config.mb_tracing_enabled:
        app.state.tracer = configure_tracing(
            config.mb_otel_service_name, config.mb_otel_exporter, app=app
        )
        if app.state.tracer:
            logger.info("OpenTelemetry tracing enabled", exporter=config.mb_otel_exporter)
        else:
            logger.warning("Tracing initialization failed")
    else:
        app.state.tracer = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Collect metrics for HTTP requests."""
        start_time = time.time()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            logger.error("Unhandled request error", path=request.url.path, error=str(e))
            status_code = 500
            response = JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "detail": str(e)}
            )

        if hasattr(request.app.state, "metrics_collector"):
            request.app.state.metrics_collector.record_http_request(
                method=request.method,
                endpoint=request.url.path,
                status=status_code,
                duration=time.time() - start_time
            )

        return response

    app.add_middleware(PathAliasMiddleware)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        client = getattr(request.app.state, "upstream_client", None)
        poller = getattr(request.app.state, "poller", None)
        if client is None or client.http_client is None:
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "service": SERVICE_NAME}
            )
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "polling": poller.running if poller else False,
            "listing_stale": poller.snapshot.stale if poller else None,
        }

    @app.get("/metrics")
    async def metrics(request: Request):
        """Prometheus metrics endpoint."""
        if hasattr(request.app.state, "metrics_collector"):
            metrics_data = request.app.state.metrics_collector.get_metrics()
            return Response(content=metrics_data, media_type="text/plain")
        return Response(content="# No metrics available\n", media_type="text/plain")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "health": "/health",
                "metrics": "/metrics",
                "models": "/api/models",
                "embedding": "/api/embedding",
                "categories": "/api/categories/{key}",
                "snapshot": "/api/snapshot",
                "admin": "/api/admin/{action}"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = DashboardConfig()
    uvicorn.run(
        "service_dashboard.app.main:app",
        host=settings.mb_dashboard_host,
        port=settings.mb_dashboard_port,
        log_level="info"
    )
