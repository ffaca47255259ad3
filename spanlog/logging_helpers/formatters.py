"""
Log formatters with span context integration.

This module provides formatters that render stdlib log records together with
the context of the active OpenTelemetry span chain: a structured JSON
formatter, a human readable one and an indented tree one.
"""

import json
import logging
from typing import Optional

from spanlog.config.settings import FormatterConfig
from spanlog.core.registry import ActiveSpanRegistry
from spanlog.logging_helpers.records import RecordAssembler, SpanLogRecord, record_extras, record_message
from spanlog.span_handlers.aggregator import aggregate_span_context

_LEVEL_COLORS = {
    "DEBUG": "\033[34m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[1;31m",
}
_RESET = "\033[0m"


class JsonSpanContextFormatter(logging.Formatter):
    """
    A log formatter that outputs one JSON object per record, flattened with
    the attributes of the active span chain.

    The record's message and fields come from the last event recorded on the
    current span. Without an active span, or when the current span has no
    event, they come from the log record itself.
    """

    def __init__(
        self,
        registry: ActiveSpanRegistry,
        config: Optional[FormatterConfig] = None,
        indent: Optional[int] = None
    ):
        super().__init__()
        self.registry = registry
        self.config = config or FormatterConfig()
        self.indent = indent
        self.assembler = RecordAssembler(self.config)

    def build_record(self, record: logging.LogRecord) -> SpanLogRecord:
        """Aggregate the current span chain and assemble the flat record."""
        aggregate = aggregate_span_context(self.registry.ancestry())
        return self.assembler.assemble(record, aggregate)

    def serialize(self, log_record: SpanLogRecord) -> str:
        if self.indent:
            return json.dumps(log_record.to_dict(), indent=self.indent)
        return json.dumps(log_record.to_dict(), separators=(",", ":"))

    def format(self, record):
        return self.serialize(self.build_record(record))


class PrettySpanFormatter(logging.Formatter):
    """
    A developer oriented formatter.

    Format: timestamp LEVEL target: message {fields}
                at file:line on thread
                in root > ... > current
    """

    def __init__(self, registry: ActiveSpanRegistry, config: Optional[FormatterConfig] = None, datefmt=None):
        super().__init__(datefmt=datefmt)
        self.registry = registry
        self.config = config or FormatterConfig()

    def _level(self, levelname):
        if self.config.no_color:
            return levelname
        return f"{_LEVEL_COLORS.get(levelname, '')}{levelname}{_RESET}"

    def format(self, record):
        extras = record_extras(record)
        line = f"{self.formatTime(record, self.datefmt)} {self._level(record.levelname)} {record.name}: {record_message(record)}"
        if extras:
            line += " " + ", ".join(f"{key}={value}" for key, value in extras.items())

        lines = [line, f"    at {record.pathname}:{record.lineno} on {record.threadName}"]

        chain = self.registry.ancestry()
        if chain:
            lines.append("    in " + " > ".join(getattr(span, "name", "") or "?" for span in chain))

        if record.exc_info:
            lines.append(self.formatException(record.exc_info))
        return "\n".join(lines)


class HierarchicalSpanFormatter(logging.Formatter):
    """
    A formatter that indents each record by the depth of the span chain it was
    emitted in, prefixed with the current span and its bracketed fields.
    """

    def __init__(self, registry: ActiveSpanRegistry, config: Optional[FormatterConfig] = None, indent_amount: int = 2):
        super().__init__()
        self.registry = registry
        self.config = config or FormatterConfig()
        self.indent_amount = indent_amount

    def format(self, record):
        chain = self.registry.ancestry()
        indent = " " * (self.indent_amount * len(chain))

        span_part = ""
        if chain:
            span = chain[-1]
            attributes = getattr(span, "attributes", None) or {}
            fields = ", ".join(
                f"{key}={value}" for key, value in attributes.items()
                if not key.startswith(("thread.", "code."))
            )
            span_part = f"{getattr(span, 'name', '')}{{{fields}}} "

        text = f"{indent}{record.levelname} {span_part}{record.name}: {record_message(record)}"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text
