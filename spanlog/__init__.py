"""
spanlog - structured span-context logging on top of OpenTelemetry.

Every log record emitted inside a span is written as one flat JSON object
carrying the merged attributes of the whole span chain.
"""

from spanlog.bootstrap import Environment, bootstrap
from spanlog.config import ConfigurationError, FormatterConfig, TracingConfig, TracingFormat
from spanlog.core.registry import ActiveSpanRegistry
from spanlog.core.timeable import TaskTimer
from spanlog.core.tracer import Tracing
from spanlog.logging_helpers.formatters import JsonSpanContextFormatter
from spanlog.logging_helpers.handlers import SpanContextStreamHandler, SpanEventHandler

__version__ = "0.1.0"

__all__ = [
    'ActiveSpanRegistry',
    'ConfigurationError',
    'Environment',
    'FormatterConfig',
    'JsonSpanContextFormatter',
    'SpanContextStreamHandler',
    'SpanEventHandler',
    'TaskTimer',
    'Tracing',
    'TracingConfig',
    'TracingFormat',
    'bootstrap',
]
