"""
Logging handlers with OpenTelemetry span integration.

``SpanEventHandler`` records every log record as an event on the current
span, which is what the span-context formatters later read back.
``SpanContextStreamHandler`` writes formatted records to a stream and never
lets a formatting or write failure reach the code that logged.
"""

import logging
import sys

from opentelemetry.trace import get_current_span

from spanlog.logging_helpers.records import record_extras, record_message


def _event_timestamp(record):
    # Float nanoseconds lose precision at epoch scale
    seconds = int(record.created)
    micros = round((record.created - seconds) * 1_000_000)
    return seconds * 1_000_000_000 + micros * 1_000


def _attribute_value(value):
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(item, (bool, int, float, str)) for item in value):
        return list(value)
    return str(value)


class SpanEventHandler(logging.Handler):
    """
    A logging handler that ONLY captures records as span events - never
    outputs to console/files.

    The event is named after the rendered message, or the raw format string
    when the arguments do not fit it, and carries ``level``,
    ``target`` and ``code.*`` attributes plus everything passed via ``extra``.
    Must be attached before the output handler so the event exists when the
    record is formatted.
    """

    def emit(self, record):
        try:
            span = get_current_span()
            if span is None or not span.is_recording():
                return

            attributes = {
                "level": record.levelname,
                "target": record.name,
                "code.filepath": record.pathname,
                "code.lineno": record.lineno,
                "code.namespace": record.module,
            }
            for key, value in record_extras(record).items():
                attributes[key] = _attribute_value(value)

            span.add_event(
                record_message(record),
                attributes=attributes,
                timestamp=_event_timestamp(record),
            )
        except Exception:
            # Don't call handleError, span capture must stay invisible
            pass


class SpanContextStreamHandler(logging.StreamHandler):
    """
    A stream handler that drops a record silently when it cannot be
    formatted or written.

    Each formatted record is written followed by a single newline and the
    stream is flushed. Nothing is written for a record whose formatting
    fails, and write errors are not reported through ``handleError``.
    """

    terminator = "\n"

    def __init__(self, stream=None):
        super().__init__(stream if stream is not None else sys.stdout)

    def emit(self, record):
        try:
            msg = self.format(record)
        except Exception:
            return

        try:
            self.stream.write(msg + self.terminator)
            self.flush()
        except Exception:
            pass

    def flush(self):
        try:
            super().flush()
        except Exception:
            pass
