"""Tests for output format selection."""

import io
import json
import logging

import pytest

from spanlog.config.settings import TracingConfig, TracingFormat
from spanlog.logging_helpers.formatters import (
    HierarchicalSpanFormatter,
    JsonSpanContextFormatter,
    PrettySpanFormatter,
)
from spanlog.logging_helpers.handlers import SpanContextStreamHandler
from spanlog.logging_helpers.selector import (
    DisabledFormat,
    HierarchicalFormat,
    PrettyFormat,
    StructuredFormat,
    select_format,
)


@pytest.mark.parametrize("tracing_format, strategy_type, formatter_type", [
    (TracingFormat.HIERARCHICAL, HierarchicalFormat, HierarchicalSpanFormatter),
    (TracingFormat.PRETTY, PrettyFormat, PrettySpanFormatter),
    (TracingFormat.JSON, StructuredFormat, JsonSpanContextFormatter),
    (TracingFormat.JSON_PRETTY, StructuredFormat, JsonSpanContextFormatter),
])
def test_each_format_builds_an_output_handler(registry, tracing_format, strategy_type, formatter_type):
    strategy = select_format(TracingConfig(format=tracing_format))

    handler = strategy.create_handler(registry, io.StringIO())

    assert isinstance(strategy, strategy_type)
    assert isinstance(handler, SpanContextStreamHandler)
    assert isinstance(handler.formatter, formatter_type)


def test_disabled_format_has_no_handler(registry):
    strategy = select_format(TracingConfig(format=TracingFormat.NONE))

    assert isinstance(strategy, DisabledFormat)
    assert strategy.create_formatter(registry) is None
    assert strategy.create_handler(registry) is None


def test_json_is_compact_and_json_pretty_indented(registry):
    compact = select_format(TracingConfig(format=TracingFormat.JSON))
    indented = select_format(TracingConfig(format=TracingFormat.JSON_PRETTY))

    assert compact.create_formatter(registry).indent is None
    assert indented.create_formatter(registry).indent == 2


def test_strategy_carries_formatter_settings():
    config = TracingConfig(service_name="orders", namespace_separator="::", no_color=True)

    strategy = select_format(config)

    assert strategy.config.service_name == "orders"
    assert strategy.config.namespace_separator == "::"
    assert strategy.config.no_color is True


def test_strategy_is_immutable():
    strategy = select_format(TracingConfig(format=TracingFormat.JSON))

    with pytest.raises(AttributeError):
        strategy.indent = 4


def test_handler_defaults_to_stdout(registry, capsys):
    strategy = select_format(TracingConfig(service_name="orders", format=TracingFormat.JSON))
    handler = strategy.create_handler(registry)
    logger = logging.getLogger("orders.stdout_test")
    logger.handlers = [handler]
    logger.setLevel(logging.INFO)
    logger.propagate = False

    logger.info("to stdout")

    assert json.loads(capsys.readouterr().out)["message"] == "to stdout"
