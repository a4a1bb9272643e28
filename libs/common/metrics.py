"""Metrics collection for ModelBoard services.

Provides a thin convenience wrapper around ``prometheus_client`` so services
can consistently record HTTP, upstream fetch, listing, admin and poll metrics.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- A single registry is kept per service (can be injected if needed)
- Decorators are provided for quick timing instrumentation
"""

import inspect
import time
from typing import Any, Optional, Callable
from functools import wraps
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
import structlog

logger = structlog.get_logger("metrics")


class MetricsCollector:
    """Centralized metrics collection for dashboard services.

    Parameters
    - service_name: Logical name used for scoping/labels if desired
    - registry: Optional custom ``CollectorRegistry`` (e.g. for testing)
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        self.request_count = Counter(
            'http_requests_total',
            'Total HTTP requests',
            ['method', 'endpoint', 'status'],
            registry=self.registry
        )

        self.request_duration = Histogram(
            'http_request_duration_seconds',
            'HTTP request duration',
            ['method', 'endpoint'],
            registry=self.registry
        )

        self.upstream_requests = Counter(
            'mb_upstream_requests_total',
            'Total upstream listing fetches partitioned by outcome',
            ['outcome'],
            registry=self.registry
        )

        self.upstream_duration = Histogram(
            'mb_upstream_request_duration_seconds',
            'Upstream listing fetch duration',
            registry=self.registry
        )

        self.models_listed = Gauge(
            'mb_models_listed',
            'Number of normalized models in the last listing response',
            ['listing'],
            registry=self.registry
        )

        self.admin_actions = Counter(
            'mb_admin_actions_total',
            'Total admin action requests',
            ['action', 'status'],
            registry=self.registry
        )

        self.polls = Counter(
            'mb_polls_total',
            'Background poll cycles partitioned by outcome',
            ['outcome'],
            registry=self.registry
        )

        self.poll_sequence = Gauge(
            'mb_poll_last_applied_sequence',
            'Sequence number of the last applied poll result',
            registry=self.registry
        )

    def record_http_request(
        self,
        method: str,
        endpoint: str,
        status: int,
        duration: float
    ) -> None:
        """Record HTTP request metrics.

        duration is expected in seconds to match Prometheus histogram units.
        """
        self.request_count.labels(method=method, endpoint=endpoint, status=status).inc()
        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_upstream_fetch(self, outcome: str, duration: float) -> None:
        """Record one upstream fetch (``ok``, ``status_error``, ``unavailable``, ``malformed``)."""
        self.upstream_requests.labels(outcome=outcome).inc()
        self.upstream_duration.observe(duration)

    def set_models_listed(self, listing: str, count: int) -> None:
        """Set the size of the last normalized listing."""
        self.models_listed.labels(listing=listing).set(count)

    def record_admin_action(self, action: str, status: int) -> None:
        self.admin_actions.labels(action=action, status=status).inc()

    def record_poll(self, outcome: str, sequence: Optional[int] = None) -> None:
        """Record a poll outcome (``applied``, ``discarded``, ``failed``)."""
        self.polls.labels(outcome=outcome).inc()
        if sequence is not None and outcome == "applied":
            self.poll_sequence.set(sequence)

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector(service_name: str) -> MetricsCollector:
    """Get or create metrics collector for a service.

    Returns a process-wide singleton to avoid duplicate collectors/labels.
    """
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector(service_name)
    return _metrics_collector


def measure_time(operation: str, **labels: Any) -> Callable:
    """Decorator to measure function execution time.

    Works for plain and ``async`` functions.

    Example
    >>> @measure_time("normalize", mode="fastest")
    ... def normalize(raw):
    ...     ...
    """
    def _log_success(start_time: float) -> None:
        logger.info(
            f"Operation {operation} completed",
            operation=operation,
            duration_ms=(time.time() - start_time) * 1000,
            **labels
        )

    def _log_failure(start_time: float, error: Exception) -> None:
        logger.error(
            f"Operation {operation} failed",
            operation=operation,
            duration_ms=(time.time() - start_time) * 1000,
            error=str(error),
            **labels
        )

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _log_failure(start_time, e)
                    raise
                _log_success(start_time)
                return result
            return async_wrapper

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_failure(start_time, e)
                raise
            _log_success(start_time)
            return result
        return wrapper
    return decorator
