"""Distributed tracing configuration for ModelBoard services.

Wraps OpenTelemetry setup with an OTLP/HTTP exporter and optional
auto-instrumentation for FastAPI and HTTPX. Also provides a scoped context
manager for manual spans.
"""

import os
from typing import Optional
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
import structlog

logger = structlog.get_logger("tracing")


def configure_tracing(
    service_name: str,
    otlp_endpoint: str = "http://localhost:4318/v1/traces",
    app=None,
    enable_instrumentation: bool = True
) -> Optional[trace.Tracer]:
    """Configure distributed tracing for a service.

    Parameters
    - service_name: Logical service identifier used in trace resources
    - otlp_endpoint: Collector endpoint for exporting spans
    - app: FastAPI application to instrument, if any
    - enable_instrumentation: Toggle built-in instrumentation hooks

    Returns
    - A tracer instance for ad-hoc span creation, or ``None`` on failure
    """
    try:
        tracer_provider = TracerProvider(
            resource=Resource.create({
                "service.name": service_name,
                "service.version": "0.1.0",
                "deployment.environment": os.getenv("MB_ENV", "local")
            })
        )
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint))
        )
        trace.set_tracer_provider(tracer_provider)

        tracer = trace.get_tracer(service_name)

        if enable_instrumentation:
            try:
                if app is not None:
                    FastAPIInstrumentor.instrument_app(app)
                HTTPXClientInstrumentor().instrument()
                logger.info("Automatic instrumentation enabled")
            except Exception as e:
                # Partial failure is acceptable; log but continue.
                logger.warning("Failed to enable some instrumentation", error=str(e))

        logger.info(
            "Distributed tracing configured",
            service_name=service_name,
            otlp_endpoint=otlp_endpoint
        )
        return tracer

    except Exception as e:
        logger.error("Failed to configure tracing", error=str(e))
        return None


class TracingContext:
    """Context manager for tracing operations.

    Starts a span on entry and ensures it ends, recording success or error.
    A ``None`` tracer turns the context into a no-op so callers do not need
    to branch on whether tracing is enabled.
    """

    def __init__(self, tracer: Optional[trace.Tracer], operation_name: str, **attributes):
        self.tracer = tracer
        self.operation_name = operation_name
        self.attributes = attributes
        self.span: Optional[trace.Span] = None

    def __enter__(self):
        if self.tracer is None:
            return None
        self.span = self.tracer.start_span(self.operation_name)
        for key, value in self.attributes.items():
            self.span.set_attribute(key, str(value))
        return self.span

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.span:
            if exc_type is not None:
                self.span.set_status(trace.Status(trace.StatusCode.ERROR, str(exc_val)))
                self.span.record_exception(exc_val)
            else:
                self.span.set_status(trace.Status(trace.StatusCode.OK))
            self.span.end()
        return False
