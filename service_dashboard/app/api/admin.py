"""Admin routes.

Actions are looked up in the application's ``AdminCommandRegistry``. The
default registry only simulates them.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import structlog

from libs.common.metrics import MetricsCollector
from ..admin.registry import AdminCommandRegistry, UnknownAdminAction
from .routes import get_metrics

logger = structlog.get_logger("dashboard_service.api.admin")

router = APIRouter()


def get_admin_registry(request: Request) -> AdminCommandRegistry:
    return request.app.state.admin_registry


@router.api_route(
    "/admin/{action}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
)
async def run_admin_action(
    action: str,
    request: Request,
    registry: AdminCommandRegistry = Depends(get_admin_registry),
    metrics_collector: MetricsCollector = Depends(get_metrics)
):
    """Run an admin action. Only ``POST`` is accepted."""
    action_label = action if action in registry else "unknown"

    if request.method != "POST":
        metrics_collector.record_admin_action(action_label, 405)
        return JSONResponse(
            status_code=405,
            content={"error": "Method not allowed"},
            headers={"Allow": "POST"}
        )

    try:
        result = registry.execute(action)
    except UnknownAdminAction:
        logger.warning("Unknown admin action requested", action=action)
        metrics_collector.record_admin_action(action_label, 400)
        return JSONResponse(status_code=400, content={"error": "Unknown admin action"})

    metrics_collector.record_admin_action(action_label, 200)
    return result.to_dict()
