"""
OpenTelemetry instrumentation for mcpdemo.

Uses the standard OTEL_* environment variables. When OTEL_ENABLED=true,
traces and metrics are exported over OTLP; otherwise the API's no-op
providers are used and instrumentation costs nothing.
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from opentelemetry import trace, metrics
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

logger = logging.getLogger(__name__)

ATTR_SERVER_NAME = "mcp.server.name"
ATTR_CAPABILITY_KIND = "mcp.capability.kind"
ATTR_CAPABILITY_NAME = "mcp.capability.name"

# Process-global initialization state
_initialized: bool = False


@dataclass
class OtelConfig:
    """OpenTelemetry configuration from environment variables."""

    enabled: bool
    service_name: str
    endpoint: str

    @classmethod
    def from_env(cls, default_service_name: str = "mcpdemo") -> "OtelConfig":
        """Create config from standard OTEL_* environment variables."""
        return cls(
            enabled=is_otel_enabled(),
            service_name=os.getenv("OTEL_SERVICE_NAME", default_service_name),
            endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317"),
        )


def is_otel_enabled() -> bool:
    """Check if OTel is enabled via environment variable."""
    return os.getenv("OTEL_ENABLED", "false").lower() in ("true", "1", "yes")


def init_otel(service_name: Optional[str] = None) -> bool:
    """Initialize OpenTelemetry with standard OTEL_* env vars.

    Idempotent - only the first call has any effect.

    Returns:
        True if OTel was initialized, False if disabled or already initialized
    """
    global _initialized
    if _initialized:
        return False

    config = OtelConfig.from_env(service_name or "mcpdemo")
    if not config.enabled:
        logger.debug("OpenTelemetry disabled (OTEL_ENABLED != true)")
        _initialized = True
        return False

    resource = Resource.create({SERVICE_NAME: config.service_name})

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=config.endpoint, insecure=True))
    )
    trace.set_tracer_provider(tracer_provider)

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=config.endpoint, insecure=True)
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[metric_reader]))

    logger.info(f"OpenTelemetry initialized: {config.endpoint} (service: {config.service_name})")
    _initialized = True
    return True


class OtelManager:
    """Creates spans and records call metrics for one server.

    Example:
        otel = OtelManager("basic-mcp-server")
        with otel.capability_span("tool", "hello") as span:
            ...
        otel.record_call("tool", "hello", duration_ms=1.2)
    """

    def __init__(self, service_name: str):
        self.service_name = service_name
        self._tracer = trace.get_tracer(f"mcpdemo.{service_name}")
        self._meter = metrics.get_meter(f"mcpdemo.{service_name}")

        # Lazily initialized metrics
        self._call_counter: Optional[metrics.Counter] = None
        self._call_duration: Optional[metrics.Histogram] = None

    def _ensure_metrics(self) -> None:
        if self._call_counter is not None:
            return

        self._call_counter = self._meter.create_counter(
            "mcpdemo.calls", description="Capability call count", unit="1"
        )
        self._call_duration = self._meter.create_histogram(
            "mcpdemo.call.duration", description="Capability call duration", unit="ms"
        )

    @contextmanager
    def span(self, name: str, kind: SpanKind = SpanKind.INTERNAL, **attributes: Any) -> Iterator[Span]:
        """Create a span with automatic end and status handling."""
        attrs = {ATTR_SERVER_NAME: self.service_name}
        attrs.update({k: v for k, v in attributes.items() if v is not None})

        with self._tracer.start_as_current_span(
            name, kind=kind, attributes=attrs, record_exception=False, set_status_on_exception=False
        ) as span:
            try:
                yield span
                span.set_status(Status(StatusCode.OK))
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise

    @contextmanager
    def capability_span(self, kind: str, name: str) -> Iterator[Span]:
        """Create a server span for one capability invocation."""
        attributes = {ATTR_CAPABILITY_KIND: kind, ATTR_CAPABILITY_NAME: name}
        with self.span(f"mcp.{kind}.{name}", SpanKind.SERVER, **attributes) as s:
            yield s

    def record_call(self, kind: str, name: str, duration_ms: float, success: bool = True) -> None:
        """Record call count and duration."""
        self._ensure_metrics()
        labels = {
            ATTR_SERVER_NAME: self.service_name,
            "kind": kind,
            "name": name,
            "success": str(success).lower(),
        }
        if self._call_counter:
            self._call_counter.add(1, labels)
        if self._call_duration:
            self._call_duration.record(duration_ms, labels)
