"""
Active span registry for spanlog.

This module provides a span processor that keeps track of every span that is
currently open on a TracerProvider, so the log formatters can walk from the
current span up to its root without the spans holding references to their
parents.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.trace import ReadableSpan, Span, SpanProcessor

logger = logging.getLogger(__name__)

THREAD_ID_KEY = "thread.id"
THREAD_NAME_KEY = "thread.name"

SpanKey = Tuple[int, int]


class ActiveSpanRegistry(SpanProcessor):
    """
    A span processor that indexes open spans by (trace_id, span_id).

    Spans are added when they start and removed when they end. When
    ``record_threads`` is enabled, the id and name of the starting thread are
    stamped on the span as ``thread.id`` / ``thread.name`` attributes.
    """

    def __init__(self, record_threads: bool = True):
        self.record_threads = record_threads
        self._spans: Dict[SpanKey, Span] = {}
        self._lock = threading.Lock()

    def on_start(self, span: Span, parent_context: Optional[Context] = None) -> None:
        if self.record_threads:
            current_thread = threading.current_thread()
            span.set_attribute(THREAD_ID_KEY, threading.get_ident())
            span.set_attribute(THREAD_NAME_KEY, current_thread.name)

        ctx = span.get_span_context()
        with self._lock:
            self._spans[(ctx.trace_id, ctx.span_id)] = span

    def on_end(self, span: ReadableSpan) -> None:
        ctx = span.get_span_context()
        with self._lock:
            self._spans.pop((ctx.trace_id, ctx.span_id), None)

    def shutdown(self) -> None:
        with self._lock:
            self._spans.clear()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._spans)

    def get(self, trace_id: int, span_id: int) -> Optional[Span]:
        """Return the open span with the given ids, if any."""
        with self._lock:
            return self._spans.get((trace_id, span_id))

    def current(self) -> Optional[trace.Span]:
        """
        Get the span active in the calling context.

        Returns:
            The current span, or None when no valid span is active.
        """
        span = trace.get_current_span()
        if span is None or not span.get_span_context().is_valid:
            return None
        return span

    def ancestry(self, span: Optional[trace.Span] = None) -> List[trace.Span]:
        """
        Build the ancestry chain of a span.

        The walk follows parent links through the registry and stops at the
        first span whose parent is not open in this process; that span is the
        root of the chain.

        Args:
            span: Span to start from. Defaults to the current span.

        Returns:
            list: Spans ordered from root to ``span`` inclusive, or an empty
            list when there is no active span.
        """
        if span is None:
            span = self.current()
        if span is None or not span.get_span_context().is_valid:
            return []

        chain = [span]
        seen = {span.get_span_context().span_id}
        parent = getattr(span, "parent", None)
        while parent is not None:
            parent_span = self.get(parent.trace_id, parent.span_id)
            if parent_span is None or parent.span_id in seen:
                break
            chain.append(parent_span)
            seen.add(parent.span_id)
            parent = getattr(parent_span, "parent", None)

        chain.reverse()
        return chain
