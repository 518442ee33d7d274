from __future__ import annotations

from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

_initialized = False


def init_tracer(service_name: str = "fastfood-mcp", endpoint: Optional[str] = None) -> None:
    """Install an OTLP/HTTP exporter when an endpoint is configured.

    Without an endpoint the API's default no-op provider stays in place.
    """
    global _initialized
    if _initialized or not endpoint:
        return
    resource = Resource(attributes={"service.name": service_name})
    provider = TracerProvider(resource=resource)
    processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint.rstrip("/") + "/v1/traces"))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)
    _initialized = True


def get_tracer(name: str = "fastfood_mcp"):
    return trace.get_tracer(name)
