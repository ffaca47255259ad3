"""
Span context aggregation.

Walks an ancestry chain of OpenTelemetry spans and collects what a log record
needs from it: the merged span attributes, the event the record is about, and
the identity of the root and current spans.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from opentelemetry.sdk.trace import Event

from spanlog.core.registry import THREAD_ID_KEY, THREAD_NAME_KEY
from spanlog.logging_helpers.values import to_json_value

# Surfaced as dedicated record fields, never merged into the context
CONTEXT_FIELDS_TO_IGNORE = frozenset([
    "code.filepath",
    "code.lineno",
    "code.namespace",
    THREAD_ID_KEY,
    THREAD_NAME_KEY,
])


@dataclass(frozen=True)
class SpanIdentity:
    span_id: int
    name: str


@dataclass(frozen=True)
class SpanContextAggregate:
    """Everything a log record takes from the active span chain."""

    root: SpanIdentity
    current: SpanIdentity
    event: Event
    thread_id: str = ""
    thread_name: str = ""
    context: Dict[str, Any] = field(default_factory=dict)


def _has_span_data(span) -> bool:
    # Non-recording spans (remote parents, sampled-out spans) carry no data
    return hasattr(span, "attributes") and hasattr(span, "events")


def _identity(span) -> SpanIdentity:
    return SpanIdentity(span_id=span.get_span_context().span_id, name=getattr(span, "name", "") or "")


def aggregate_span_context(chain: Sequence[Any]) -> Optional[SpanContextAggregate]:
    """
    Aggregate the attributes and current event of a span chain.

    The chain is traversed once, root to leaf. An attribute key is kept the
    first time it is seen, so on duplicates the value from the span closest to
    the root wins. Thread information is read from the current span only.

    Args:
        chain: Spans ordered from root to current

    Returns:
        SpanContextAggregate, or None when the chain is empty or the current
        span has no recorded event.
    """
    if not chain:
        return None

    last_index = len(chain) - 1
    context: Dict[str, Any] = {}
    event = None
    thread_id = ""
    thread_name = ""

    for index, span in enumerate(chain):
        if not _has_span_data(span):
            continue

        is_current = index == last_index
        if is_current and span.events:
            event = span.events[-1]

        attributes = span.attributes or {}
        for key, value in attributes.items():
            if is_current and key == THREAD_ID_KEY:
                thread_id = str(value)
            elif is_current and key == THREAD_NAME_KEY:
                thread_name = str(value)

            if key in CONTEXT_FIELDS_TO_IGNORE or key in context:
                continue
            context[key] = to_json_value(value)

    if event is None:
        return None

    return SpanContextAggregate(
        root=_identity(chain[0]),
        current=_identity(chain[last_index]),
        event=event,
        thread_id=thread_id,
        thread_name=thread_name,
        context=context,
    )
