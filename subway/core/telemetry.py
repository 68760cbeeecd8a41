"""OpenTelemetry tracing helpers.

Only the OpenTelemetry API is used here. Without an SDK TracerProvider
installed by the deployment, spans are non-recording and cost nothing.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span

# OpenTelemetry attribute values can be primitives or lists of primitives
AttributeValue = str | int | float | bool | list[str] | list[int] | list[float] | list[bool]


@contextmanager
def service_span(
    name: str,
    service: str,
    kind: SpanKind = SpanKind.INTERNAL,
    **attributes: AttributeValue,
) -> Generator["Span"]:
    """Context manager for service operation spans with explicit status.

    Creates an OpenTelemetry span with consistent attributes and proper status handling:
    - Sets StatusCode.OK on successful completion
    - Exceptions propagate; the SDK (when installed) records them and sets StatusCode.ERROR

    The tracer is acquired at call time so a TracerProvider installed after
    import is still picked up.

    Args:
        name: Span name (e.g., "line.add_section")
        service: Service name for peer.service attribute (e.g., "line-service")
        kind: Span kind (default INTERNAL)
        **attributes: Additional span attributes

    Yields:
        Span: The active span for setting additional attributes

    Example:
        with service_span("line.add_section", "line-service", line_id=str(line_id)) as span:
            line.add_section(...)
            span.set_attribute("line.section_count", len(line.sections))
    """
    tracer = trace.get_tracer(__name__)
    span_attributes = {
        "peer.service": service,
        **attributes,
    }
    with tracer.start_as_current_span(
        name,
        kind=kind,
        attributes=span_attributes,
    ) as span:
        yield span
        span.set_status(Status(StatusCode.OK))


def get_current_trace_id() -> str | None:
    """
    Get current OpenTelemetry trace ID for correlation.

    Returns:
        32-character hex trace ID, or None if no valid span context
    """
    span = trace.get_current_span()
    ctx = span.get_span_context()
    if not ctx.is_valid or ctx.trace_id == 0:
        return None
    return format(ctx.trace_id, "032x")
