"""
Sarthi Guidance Service - OpenTelemetry Tracing Module

VerseRetriever opens a "verse_retrieval" span per query, recording keyword
and match counts and the retrieval status. GuidanceComposer wraps each
answer in a "guidance_compose" span. Both create spans unconditionally:
until the lifespan handler calls configure_tracing() (SARTHI_TRACING_ENABLED)
the OpenTelemetry API hands out no-op tracers, so the diagnostics script and
unit tests pay nothing for them.
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

_configured: bool = False

SERVICE_NAME = "sarthi-guidance-service"


def configure_tracing(
    service_name: str = SERVICE_NAME,
    service_version: str = "0.1.0",
    console_export: bool = False,
) -> None:
    """Install the SDK tracer provider for the guidance service.

    OpenTelemetry only accepts one global provider per process, so calls
    after the first are ignored. With console_export
    (SARTHI_TRACING_CONSOLE_EXPORT) finished retrieval and compose spans
    are printed to stdout, which is handy when tuning stop words locally.

    Args:
        service_name: service.name resource attribute
        service_version: service.version resource attribute, from settings
        console_export: Print spans to stdout as they finish
    """
    global _configured

    if _configured:
        return

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )

    provider = TracerProvider(resource=resource)

    if console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    _configured = True


def get_tracer(name: str) -> Any:
    """Module-level tracer, e.g. tracer = get_tracer(__name__) in retriever.py."""
    return trace.get_tracer(name)


def is_tracing_configured() -> bool:
    return _configured


def reset_tracing() -> None:
    """Forget that tracing was configured; used by the core tests."""
    global _configured
    _configured = False
