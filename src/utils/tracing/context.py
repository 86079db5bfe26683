"""
Span helpers for editor operations.

Attributes passed to these helpers are recorded under the ``tabledit.``
namespace (``table`` becomes ``tabledit.table``) so editor spans can be
filtered apart from driver or exporter spans. Enums are recorded by
value. ``None`` values are left off the span.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .tracer import get_tracer

ATTRIBUTE_PREFIX = "tabledit."


def span_attributes(attributes: dict[str, Any]) -> dict[str, Any]:
    """Namespace and normalize attribute values for a span."""
    normalized = {}
    for key, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        if not isinstance(value, (bool, int, float, str)):
            value = str(value)
        normalized[f"{ATTRIBUTE_PREFIX}{key}"] = value
    return normalized


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes
) -> Iterator[trace.Span]:
    """
    Run a block inside a span named ``operation_name``.

    An exception escaping the block marks the span as errored with its type
    and message before propagating.

    Example:
        >>> with trace_operation("commit_batch", connection_id="local", statement_count=3):
        ...     backend.execute_mutations("local", statements)
    """
    tracer = get_tracer()

    with tracer.start_as_current_span(
        operation_name,
        kind=kind,
        attributes=span_attributes(attributes),
    ) as span:
        try:
            yield span
        except Exception as e:
            span.set_attributes({"error": True, "error.type": type(e).__name__})
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise


def add_span_attributes(**attributes) -> None:
    """Add namespaced attributes to the current span, if one is recording."""
    current_span = trace.get_current_span()
    if current_span.is_recording():
        current_span.set_attributes(span_attributes(attributes))


def add_span_event(name: str, **attributes) -> None:
    """Record an event such as ``changeset_cleared`` on the current span."""
    current_span = trace.get_current_span()
    if current_span.is_recording():
        current_span.add_event(name, attributes=span_attributes(attributes))
