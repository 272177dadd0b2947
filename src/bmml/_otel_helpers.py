"""
Span events for bmml runs.

Every bmml span event is named ``bmml.<event>`` and carries the document
it describes as ``bmml.source`` when one is known.  Emission is a no-op
without OpenTelemetry or outside a recording span.

Usage::

    from bmml._otel_helpers import add_span_event

    add_span_event("lint.complete", {"bmml.version": "v2"}, source="model.bmml")
"""

from __future__ import annotations

from typing import Union

try:
    from opentelemetry import trace as otel_trace

    HAS_OTEL = True
except ImportError:  # pragma: no cover
    HAS_OTEL = False

SpanAttributes = dict[str, Union[str, int, float, bool]]

EVENT_PREFIX = "bmml."


def add_span_event(event: str, attributes: SpanAttributes, source: str = "") -> bool:
    """Record ``bmml.<event>`` on the current span.

    Returns True when the event was recorded.
    """
    if not HAS_OTEL:
        return False
    span = otel_trace.get_current_span()
    if not (span and span.is_recording()):
        return False
    if source:
        attributes = {**attributes, "bmml.source": source}
    span.add_event(name=EVENT_PREFIX + event, attributes=attributes)
    return True
