"""
Bootstrap of the spanlog observability stack.

Loads the layered configuration, starts tracing with the selected log output
format, and optionally metrics with the task duration timer.
"""

import logging
from typing import Any, Dict, List, Optional, TextIO

from opentelemetry.sdk.metrics import MeterProvider

from spanlog.config.loader import load_config, find_and_load_config
from spanlog.config.settings import TracingConfig
from spanlog.core.metrics import init_metrics
from spanlog.core.timeable import TaskTimer
from spanlog.core.tracer import Tracing
from spanlog.logging_helpers.integrations import bridge_loguru_to_std_logging

logger = logging.getLogger(__name__)


class Environment:
    """Handles on everything ``bootstrap`` started."""

    def __init__(
        self,
        config: Dict[str, Any],
        tracing: Tracing,
        meter_provider: Optional[MeterProvider] = None,
        timer: Optional[TaskTimer] = None,
        loguru_sink_id: Optional[int] = None
    ):
        self.config = config
        self.tracing = tracing
        self.meter_provider = meter_provider
        self.timer = timer
        self.loguru_sink_id = loguru_sink_id

    @property
    def service_name(self) -> str:
        return self.tracing.config.service_name

    def shutdown(self) -> None:
        if self.loguru_sink_id is not None:
            from loguru import logger as loguru_logger
            loguru_logger.remove(self.loguru_sink_id)
            self.loguru_sink_id = None
        self.tracing.shutdown()
        if self.meter_provider is not None:
            self.meter_provider.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False


def bootstrap(
    service_name: Optional[str] = None,
    config_path: Optional[str] = None,
    tracing_format: Optional[str] = None,
    log_level: Optional[str] = None,
    disable_opentelemetry: Optional[bool] = None,
    enable_metrics: Optional[bool] = None,
    metrics_exporters: Optional[List[str]] = None,
    enable_loguru: bool = False,
    stream: Optional[TextIO] = None,
    env_prefix: str = "SPANLOG_",
    merge_env: bool = True,
    set_global: bool = True
) -> Environment:
    """
    Bootstrap tracing, span-context logging and metrics.

    Explicit arguments override the loaded configuration.

    Args:
        service_name: Name of the service
        config_path: Path to configuration file. Searched for when omitted.
        tracing_format: Output format (none, hierarchical, pretty, json, json_pretty)
        log_level: Logging level
        disable_opentelemetry: Skip OTLP span export
        enable_metrics: Whether to enable metrics and the task timer
        metrics_exporters: List of metrics exporters
        enable_loguru: Bridge loguru records into standard logging
        stream: Destination of the log output. Defaults to stdout.
        env_prefix: Prefix for environment variables
        merge_env: Whether to merge environment variables
        set_global: Register the providers globally

    Returns:
        Environment

    Raises:
        ConfigurationError: If the configured output format is unknown

    Example:
        env = bootstrap(service_name="orders", tracing_format="json")
        tracer = env.tracing.tracer()
    """
    if config_path:
        config = load_config(config_path, env_prefix, merge_env)
    else:
        config = find_and_load_config(env_prefix=env_prefix, merge_env=merge_env)

    if service_name:
        config.setdefault("service", {})["name"] = service_name
    if tracing_format:
        config.setdefault("tracing", {})["format"] = tracing_format
    if log_level:
        config.setdefault("tracing", {})["log_level"] = log_level
    if disable_opentelemetry is not None:
        config.setdefault("tracing", {})["disable_opentelemetry"] = disable_opentelemetry
    if enable_metrics is not None:
        config.setdefault("metrics", {})["enabled"] = enable_metrics
    if metrics_exporters:
        config.setdefault("metrics", {})["exporters"] = metrics_exporters

    tracing_config = TracingConfig.from_dict(config)
    tracing = Tracing.init(
        tracing_config.service_name,
        tracing_config,
        stream=stream,
        set_global=set_global,
    )
    logger.info(f"Initialized tracing for service: {tracing_config.service_name}")

    meter_provider = None
    timer = None
    metrics_config = config.get("metrics", {})
    if metrics_config.get("enabled", True):
        meter_provider = init_metrics(
            service_name=tracing_config.service_name,
            exporters=metrics_config.get("exporters", ["console"]),
            export_interval_millis=metrics_config.get("export_interval_millis", 30000),
            otlp_endpoint=metrics_config.get("otlp_endpoint"),
            set_global=set_global,
        )
        timer = TaskTimer(
            tracing_config.service_name,
            meter_provider.get_meter(tracing_config.service_name),
        )

    loguru_sink_id = None
    if enable_loguru:
        loguru_sink_id = bridge_loguru_to_std_logging()
        logger.info("Bridged loguru to standard logging for span capture")

    return Environment(config, tracing, meter_provider, timer, loguru_sink_id)
