"""API routes for the dashboard service."""

import time
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
import structlog

from libs.catalog import SelectionMode, create_normalizer, to_payload
from libs.catalog.views import CatalogQuery, apply_query, category_view, resolve_category
from libs.common.config import DashboardConfig
from libs.common.metrics import MetricsCollector
from libs.common.tracing import TracingContext
from ..polling.poller import ModelPoller
from ..upstream.client import UpstreamClient, UpstreamError, UpstreamStatusError

logger = structlog.get_logger("dashboard_service.api")

router = APIRouter()

EMBEDDINGS_TYPE = "embeddings"

_fastest_normalizer = create_normalizer(SelectionMode.FASTEST)
_best_normalizer = create_normalizer(SelectionMode.BEST_PERFORMANCE)


def get_upstream_client(request: Request) -> UpstreamClient:
    """Get upstream client from application state."""
    return request.app.state.upstream_client


def get_metrics(request: Request) -> MetricsCollector:
    """Get metrics collector from application state."""
    return request.app.state.metrics_collector


def get_config(request: Request) -> DashboardConfig:
    return request.app.state.config


def get_poller(request: Request) -> ModelPoller:
    return request.app.state.poller


def _error(status_code: int, **content) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)


def _listing(content, config: DashboardConfig) -> JSONResponse:
    return JSONResponse(content=content, headers={"Cache-Control": config.mb_cache_control})


@router.get("/models")
async def list_models(
    request: Request,
    category: Optional[str] = Query(None, description="Tab key or upstream type tag"),
    search: str = Query("", description="Substring of model name or provider id"),
    capability: List[str] = Query([], description="Required capability flags"),
    sort: Optional[str] = Query(None, description="Column to sort by"),
    order: str = Query("asc", description="asc or desc"),
    client: UpstreamClient = Depends(get_upstream_client),
    metrics_collector: MetricsCollector = Depends(get_metrics),
    config: DashboardConfig = Depends(get_config)
):
    """List every model against its fastest provider, in upstream order.

    The optional query parameters narrow and sort the listing; without them
    the full listing is returned unchanged.
    """
    if order not in ("asc", "desc"):
        return _error(400, error="order must be 'asc' or 'desc'")
    try:
        query = CatalogQuery(
            category=category,
            search=search,
            capabilities=tuple(capability),
            sort_field=sort,
            ascending=order == "asc",
        )
    except ValueError as e:
        return _error(400, error=str(e))

    start_time = time.time()
    try:
        raw_models = await client.fetch_models()
        with TracingContext(request.app.state.tracer, "normalize_listing", mode="fastest"):
            models = _fastest_normalizer.normalize(raw_models)
    except UpstreamStatusError as e:
        return _error(e.status_code, error="Upstream API error")
    except Exception as e:
        logger.error("Model listing failed", error=str(e), error_type=type(e).__name__)
        return _error(500, error="Server error")

    if not query.is_empty():
        models = apply_query(models, query)

    metrics_collector.set_models_listed("models", len(models))
    logger.info(
        "Model listing served",
        count=len(models),
        latency_ms=(time.time() - start_time) * 1000
    )
    return _listing({"models": to_payload(models)}, config)


@router.get("/embedding")
async def list_embedding_models(
    request: Request,
    client: UpstreamClient = Depends(get_upstream_client),
    metrics_collector: MetricsCollector = Depends(get_metrics),
    config: DashboardConfig = Depends(get_config)
):
    """Embedding models against their best-performing provider, ranked."""
    try:
        raw_models = await client.fetch_models()
        with TracingContext(request.app.state.tracer, "normalize_listing", mode="best_performance"):
            models = _best_normalizer.normalize(raw_models, category=EMBEDDINGS_TYPE)
    except UpstreamStatusError as e:
        return _error(e.status_code, error="Upstream API error")
    except Exception as e:
        logger.error("Embedding listing failed", error=str(e), error_type=type(e).__name__)
        status_code = e.status_code if isinstance(e, UpstreamError) else 500
        return _error(status_code, error="Internal server error", details=str(e))

    metrics_collector.set_models_listed("embedding", len(models))
    return _listing(to_payload(models), config)


@router.get("/categories/{key}")
async def get_category(
    key: str,
    client: UpstreamClient = Depends(get_upstream_client),
    metrics_collector: MetricsCollector = Depends(get_metrics),
    config: DashboardConfig = Depends(get_config)
):
    """One category page: measured models ranked by uptime, with a summary."""
    if resolve_category(key) is None:
        return _error(404, error="Unknown category")

    try:
        raw_models = await client.fetch_models()
    except UpstreamStatusError as e:
        return _error(e.status_code, error="Upstream API error")
    except UpstreamError as e:
        logger.error("Category listing failed", category=key, error=str(e))
        return _error(500, error="Server error")

    view = category_view(_fastest_normalizer.normalize(raw_models), key)
    metrics_collector.set_models_listed(f"category:{view.tab.key}", len(view.models))
    return _listing(view.to_dict(), config)


@router.get("/snapshot")
async def get_snapshot(poller: ModelPoller = Depends(get_poller)):
    """Latest listing applied by the background poller."""
    return poller.snapshot.to_dict()
