"""
Tracing using OpenTelemetry.

Instruments statement synthesis, commit batches and page reloads so a slow
or failing commit can be followed end to end.
"""

from .context import add_span_attributes, add_span_event, span_attributes, trace_operation
from .decorators import trace_function
from .tracer import get_tracer, initialize_tracing, shutdown_tracing

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "trace_function",
    "add_span_attributes",
    "add_span_event",
    "span_attributes",
]
