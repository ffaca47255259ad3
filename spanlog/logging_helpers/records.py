"""
Assembly of flat span-context log records.

A ``SpanLogRecord`` is built fresh for every emitted ``logging.LogRecord``,
either from the span context aggregate of the active span chain or, when
there is nothing to aggregate, from the record's own metadata.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from spanlog.config.settings import FormatterConfig
from spanlog.logging_helpers.values import convert_attributes
from spanlog.span_handlers.aggregator import SpanContextAggregate

# Event attributes already surfaced as record fields
EVENT_FIELDS_TO_IGNORE = frozenset([
    "code.filepath",
    "code.lineno",
    "code.namespace",
    "level",
    "name",
    "target",
])

# Attributes every logging.LogRecord carries; anything else came in via `extra`
_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


@dataclass(frozen=True)
class SpanLogRecord:
    """One structured log line. Field order is the serialized key order."""

    level: str
    timestamp: str
    target: str
    target_simple: str
    file: Optional[str]
    line: Optional[int]
    thread_id: str
    thread_name: str
    root_span_id: int
    root_span: str
    root_span_simple: str
    current_span_id: int
    current_span: str
    current_span_simple: str
    from_service: int
    message: str
    fields: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "timestamp": self.timestamp,
            "target": self.target,
            "target_simple": self.target_simple,
            "file": self.file,
            "line": self.line,
            "thread_id": self.thread_id,
            "thread_name": self.thread_name,
            "root_span_id": self.root_span_id,
            "root_span": self.root_span,
            "root_span_simple": self.root_span_simple,
            "current_span_id": self.current_span_id,
            "current_span": self.current_span,
            "current_span_simple": self.current_span_simple,
            "from_service": self.from_service,
            "message": self.message,
            "fields": dict(self.fields),
            "context": dict(self.context),
        }


def simple_name(name: str, separator: str = ".") -> str:
    """
    Return the last segment of a namespaced name.

    Example:
        simple_name("svc::module::Handler", "::") -> "Handler"
        simple_name("Handler", "::") -> "Handler"
    """
    if not separator:
        return name
    return name.rpartition(separator)[2]


def service_origin(target: str, service_name: str) -> int:
    """1 when the target belongs to the instrumented service, else 0."""
    return 1 if service_name and target.startswith(service_name) else 0


def format_timestamp(time_ns: int) -> str:
    """Render nanoseconds since the epoch as UTC ISO-8601 with milliseconds."""
    seconds, remainder = divmod(time_ns, 1_000_000_000)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{remainder // 1_000_000:03d}Z"


def record_message(record: logging.LogRecord) -> str:
    """The rendered message, or the raw format string when its arguments do not fit."""
    try:
        return record.getMessage()
    except Exception:
        return str(record.msg)


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Attributes passed to a logging call through ``extra``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
    }


class RecordAssembler:
    """
    Builds ``SpanLogRecord`` values.

    Args:
        config: Immutable formatter settings
    """

    def __init__(self, config: FormatterConfig):
        self.config = config

    def assemble(
        self,
        record: logging.LogRecord,
        aggregate: Optional[SpanContextAggregate] = None
    ) -> SpanLogRecord:
        if aggregate is None:
            return self._without_context(record)
        return self._with_context(record, aggregate)

    def _simple(self, name: str) -> str:
        return simple_name(name, self.config.namespace_separator)

    def _without_context(self, record: logging.LogRecord) -> SpanLogRecord:
        fields = convert_attributes(record_extras(record), ignore=("message",))
        target = record.name or ""

        return SpanLogRecord(
            level=record.levelname,
            timestamp=format_timestamp(time.time_ns()),
            target=target,
            target_simple=self._simple(target),
            file=record.pathname or None,
            line=record.lineno or None,
            thread_id="",
            thread_name=record.threadName or "",
            root_span_id=0,
            root_span="",
            root_span_simple="",
            current_span_id=0,
            current_span="",
            current_span_simple="",
            from_service=service_origin(target, self.config.service_name),
            message=record_message(record),
            fields=fields,
            context={},
        )

    def _with_context(self, record: logging.LogRecord, aggregate: SpanContextAggregate) -> SpanLogRecord:
        event = aggregate.event
        fields = convert_attributes(event.attributes or {}, ignore=EVENT_FIELDS_TO_IGNORE)
        target = record.name or ""

        return SpanLogRecord(
            level=record.levelname,
            timestamp=format_timestamp(event.timestamp),
            target=target,
            target_simple=self._simple(target),
            file=record.pathname or None,
            line=record.lineno or None,
            thread_id=aggregate.thread_id,
            thread_name=aggregate.thread_name,
            root_span_id=aggregate.root.span_id,
            root_span=aggregate.root.name,
            root_span_simple=self._simple(aggregate.root.name),
            current_span_id=aggregate.current.span_id,
            current_span=aggregate.current.name,
            current_span_simple=self._simple(aggregate.current.name),
            from_service=service_origin(target, self.config.service_name),
            message=event.name,
            fields=fields,
            context=dict(aggregate.context),
        )
