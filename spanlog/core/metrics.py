"""
Metrics module for spanlog.

This module provides functions for initializing OpenTelemetry metrics, used
by the task timer to record task durations.
"""

import logging
from typing import List, Optional

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

logger = logging.getLogger(__name__)


def create_metric_readers(
    exporters: Optional[List[str]] = None,
    export_interval_millis: int = 30000,
    otlp_endpoint: Optional[str] = None
) -> List[MetricReader]:
    """
    Create periodic metric readers for the named exporters.

    Args:
        exporters (list): Exporter names. Options: "console", "otlp".
        export_interval_millis (int): Export interval in milliseconds.
        otlp_endpoint (str): Endpoint for the OTLP exporter.

    Returns:
        list: Metric readers
    """
    readers: List[MetricReader] = []
    for exporter_name in exporters or ["console"]:
        name = exporter_name.lower()
        if name == "console":
            readers.append(PeriodicExportingMetricReader(
                exporter=ConsoleMetricExporter(),
                export_interval_millis=export_interval_millis,
            ))
        elif name == "otlp":
            kwargs = {"endpoint": otlp_endpoint} if otlp_endpoint else {}
            readers.append(PeriodicExportingMetricReader(
                exporter=OTLPMetricExporter(**kwargs),
                export_interval_millis=export_interval_millis,
            ))
            logger.info(f"Added OTLP metric exporter with endpoint {otlp_endpoint or 'default'}")
        else:
            logger.warning(f"Unknown metric exporter: {exporter_name}")
    return readers


def init_metrics(
    service_name: str,
    exporters: Optional[List[str]] = None,
    export_interval_millis: int = 30000,
    otlp_endpoint: Optional[str] = None,
    metric_readers: Optional[List[MetricReader]] = None,
    set_global: bool = True
) -> MeterProvider:
    """
    Initialize an OpenTelemetry metrics pipeline.

    Args:
        service_name (str): Your service name.
        exporters (list): List of exporters. Options: "console", "otlp".
        export_interval_millis (int): Export interval in milliseconds.
        otlp_endpoint (str): Endpoint for the OTLP exporter.
        metric_readers (list): Readers to use instead of building them from
            ``exporters``.
        set_global (bool): Register the provider as the global meter provider.

    Returns:
        MeterProvider: The initialized meter provider.
    """
    resource = Resource.create({"service.name": service_name})

    if metric_readers is None:
        metric_readers = create_metric_readers(exporters, export_interval_millis, otlp_endpoint)

    provider = MeterProvider(resource=resource, metric_readers=metric_readers)
    if set_global:
        metrics.set_meter_provider(provider)

    logger.info(f"Metrics initialized for service: {service_name}")
    return provider
