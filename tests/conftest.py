"""Shared pytest fixtures for spanlog tests."""

import io
import logging

import pytest
from opentelemetry.sdk.trace import TracerProvider

from spanlog.config.settings import FormatterConfig
from spanlog.core.registry import ActiveSpanRegistry
from spanlog.logging_helpers.formatters import JsonSpanContextFormatter


@pytest.fixture
def registry():
    """Registry without thread stamping, so span attributes are exactly what tests set."""
    return ActiveSpanRegistry(record_threads=False)


@pytest.fixture
def tracer_provider(registry):
    provider = TracerProvider()
    provider.add_span_processor(registry)
    yield provider
    provider.shutdown()


@pytest.fixture
def tracer(tracer_provider):
    return tracer_provider.get_tracer("spanlog.tests")


@pytest.fixture
def formatter_config():
    return FormatterConfig(service_name="orders", namespace_separator=".")


@pytest.fixture
def json_formatter(registry, formatter_config):
    return JsonSpanContextFormatter(registry, formatter_config)


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def make_record():
    """Factory for stdlib LogRecords built the way Logger.makeRecord builds them."""
    def factory(name="orders.billing", msg="charging", level=logging.INFO, extra=None,
                pathname="/app/orders/billing.py", lineno=42):
        record = logging.LogRecord(name, level, pathname, lineno, msg, (), None, func="charge")
        for key, value in (extra or {}).items():
            setattr(record, key, value)
        return record
    return factory
