"""Tests for bootstrap."""

import io
import json
import logging

import pytest
from loguru import logger as loguru_logger

from spanlog import bootstrap
from spanlog.config import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "spanlog.yaml"
    path.write_text(
        "service:\n"
        "  name: orders\n"
        "tracing:\n"
        "  format: json\n"
        "  disable_opentelemetry: true\n"
        "metrics:\n"
        "  enabled: false\n"
    )
    return str(path)


@pytest.fixture(autouse=True)
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def lines_for(stream, target):
    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    return [line for line in lines if line["target"] == target]


def test_bootstrap_from_file(config_file):
    stream = io.StringIO()

    with bootstrap(config_path=config_file, stream=stream, merge_env=False, set_global=False) as env:
        with env.tracing.tracer().start_as_current_span("HTTP request", attributes={"route": "/pay"}):
            logging.getLogger("orders.api").info("accepted", extra={"order_id": 7})

    assert env.service_name == "orders"
    assert env.meter_provider is None
    assert env.timer is None
    [output] = lines_for(stream, "orders.api")
    assert output["message"] == "accepted"
    assert output["fields"] == {"order_id": 7}
    assert output["context"] == {"route": "/pay"}
    assert output["from_service"] == 1


def test_arguments_override_file(config_file):
    stream = io.StringIO()

    env = bootstrap(
        service_name="billing",
        config_path=config_file,
        tracing_format="none",
        log_level="warning",
        stream=stream,
        merge_env=False,
        set_global=False,
    )
    try:
        logging.getLogger("billing").warning("quiet")
    finally:
        env.shutdown()

    assert env.service_name == "billing"
    assert env.tracing.config.log_level == "WARNING"
    assert env.config["tracing"]["format"] == "none"
    assert stream.getvalue() == ""


def test_metrics_and_timer(config_file):
    env = bootstrap(
        config_path=config_file,
        enable_metrics=True,
        metrics_exporters=["console"],
        stream=io.StringIO(),
        merge_env=False,
        set_global=False,
    )
    try:
        assert env.timer.metric_name == "orders_task_duration_ms"
        env.timer.record("boot", 1.0)
    finally:
        env.shutdown()


def test_loguru_bridge(config_file):
    stream = io.StringIO()

    with bootstrap(
        config_path=config_file,
        enable_loguru=True,
        stream=stream,
        merge_env=False,
        set_global=False,
    ) as env:
        sink_id = env.loguru_sink_id
        loguru_logger.bind(order_id=7).info("from loguru")

    assert env.loguru_sink_id is None
    with pytest.raises(ValueError):
        loguru_logger.remove(sink_id)
    [output] = [line for line in lines_for(stream, __name__) if line["message"] == "from loguru"]
    assert output["fields"] == {"order_id": 7}
    assert output["from_service"] == 0


def test_unknown_format_is_rejected(config_file):
    with pytest.raises(ConfigurationError):
        bootstrap(config_path=config_file, tracing_format="xml", merge_env=False, set_global=False)
