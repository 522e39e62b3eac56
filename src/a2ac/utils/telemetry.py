"""OpenTelemetry tracing helpers for the A2A client.

Every agent call opens a span through :func:`get_tracer`.  Until the
OpenTelemetry SDK is configured the API hands out no-op tracers, so the
spans cost nothing unless tracing is switched on.

Usage::

    from a2ac.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("a2a.tasks/send") as span:
        span.set_attribute(ATTR_AGENT_URL, url)

To export spans, call :func:`configure_telemetry` once at startup
(requires the ``otel`` extra: ``pip install a2a-client[otel]``).
"""

from __future__ import annotations

from typing import Any, TextIO

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys
# ---------------------------------------------------------------------------

ATTR_AGENT_ID = "a2a.agent.id"
ATTR_AGENT_URL = "a2a.agent.url"
ATTR_METHOD = "a2a.method"
ATTR_TASK_ID = "a2a.task.id"
ATTR_TASK_STATE = "a2a.task.state"
ATTR_EVENT_COUNT = "a2a.stream.events"
ATTR_TOOL_NAME = "a2a.tool.name"

_INSTRUMENTATION_NAME = "a2ac"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "a2ac",
    export_to_console: bool = True,
    console_stream: TextIO | None = None,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider so agent spans get exported.

    Needs the ``otel`` extra (``pip install a2a-client[otel]``).

    Parameters
    ----------
    service_name:
        Reported as the ``service.name`` resource attribute.
    export_to_console:
        Write each finished span as JSON to *console_stream*.
    console_stream:
        Where console spans go; stdout when omitted.  The CLI passes
        stderr so span dumps never mix with command output.
    otlp_endpoint:
        Also ship spans in batches to this OTLP/gRPC collector.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` (or, with *otlp_endpoint*,
        ``opentelemetry-exporter-otlp``) is missing.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install a2a-client[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if export_to_console:
        _add_console_exporter(provider, console_stream)
    if otlp_endpoint:
        _add_otlp_exporter(provider, otlp_endpoint)
    trace.set_tracer_provider(provider)


def _add_console_exporter(provider: Any, stream: TextIO | None) -> None:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    exporter = ConsoleSpanExporter() if stream is None else ConsoleSpanExporter(out=stream)
    provider.add_span_processor(SimpleSpanProcessor(exporter))


def _add_otlp_exporter(provider: Any, endpoint: str) -> None:
    from opentelemetry.sdk.trace.export import BatchSpanProcessor  # pyright: ignore[reportMissingImports]

    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
            OTLPSpanExporter,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install a2a-client[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
