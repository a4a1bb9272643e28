"""Builders for raw upstream listing entries."""

from typing import Any, Dict, Iterable, Optional


def raw_provider(
    prefix: str,
    uptime: Any = None,
    latency: Any = None,
    features: Iterable[str] = ()
) -> Dict[str, Any]:
    metrics = {}
    if uptime is not None:
        metrics["uptime_percentage"] = uptime
    if latency is not None:
        metrics["latency"] = latency
    return {"prefix": prefix, "features": list(features), "performance_metrics": metrics}


def raw_model(
    name: str,
    type: str = "chat/completion",
    providers: Iterable[Dict[str, Any]] = (),
    features: Iterable[str] = (),
    context_window: Optional[int] = None,
    display_name: Optional[str] = None
) -> Dict[str, Any]:
    entry = {
        "name": name,
        "type": type,
        "features": list(features),
        "proxy_providers": list(providers),
    }
    if context_window is not None:
        entry["context_window"] = context_window
    if display_name is not None:
        entry["display_name"] = display_name
    return entry
