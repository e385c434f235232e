"""
trace_utils.py

Centralized helper utilities for tracing blue/green deployment spans.
Without a configured TracerProvider OpenTelemetry hands out non-recording spans.
"""

import logging

from opentelemetry import trace as _trace_api
from opentelemetry.trace import Span

from lambdaroute import __version__

_tracer = _trace_api.get_tracer("lambdaroute.bluegreen", __version__)

logger = logging.getLogger(__name__)


def start_trace_span_if_available(span_name: str, **attrs) -> Span:
    span = _tracer.start_span(span_name)
    for k, v in attrs.items():
        if v is not None:
            span.set_attribute(k, v)
    return span


def mark_span_ok(span: Span) -> None:
    span.set_status(_trace_api.Status(_trace_api.StatusCode.OK))


def mark_span_error(span: Span, description: str, exc: BaseException = None) -> None:
    if exc is not None:
        span.record_exception(exc)
    span.set_status(_trace_api.Status(_trace_api.StatusCode.ERROR, description))
