"""
Tracer module for spanlog.

This module initializes the OpenTelemetry tracing pipeline together with the
span-context log output: the active span registry, the optional OTLP span
export and the output handler of the selected format.
"""

import logging
from typing import Iterable, List, Optional, TextIO

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor, SpanExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

from spanlog.config.settings import TracingConfig
from spanlog.core.registry import ActiveSpanRegistry
from spanlog.logging_helpers.handlers import SpanEventHandler
from spanlog.logging_helpers.selector import FormatStrategy, select_format

logger = logging.getLogger(__name__)


def create_tracer_provider(
    config: TracingConfig,
    registry: ActiveSpanRegistry,
    span_exporters: Optional[Iterable[SpanExporter]] = None
) -> TracerProvider:
    """
    Create a tracer provider with the registry as its first span processor.

    Args:
        config: Tracing settings
        registry: Registry tracking the open spans
        span_exporters: Extra exporters, attached with a simple processor

    Returns:
        TracerProvider
    """
    resource = Resource.create({"service.name": config.service_name})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(registry)

    if not config.disable_opentelemetry:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=config.opentelemetry_endpoint))
        )
        logger.info(f"Added OTLP span exporter with endpoint {config.opentelemetry_endpoint}")

    for exporter in span_exporters or []:
        provider.add_span_processor(SimpleSpanProcessor(exporter))

    return provider


class Tracing:
    """
    A running tracing pipeline.

    Created with ``Tracing.init``; ``shutdown`` (or leaving the ``with``
    block) detaches the log handlers and flushes the span processors.
    """

    def __init__(
        self,
        config: TracingConfig,
        provider: TracerProvider,
        registry: ActiveSpanRegistry,
        strategy: FormatStrategy,
        handlers: List[logging.Handler],
        target_logger: logging.Logger
    ):
        self.config = config
        self.provider = provider
        self.registry = registry
        self.strategy = strategy
        self.handlers = handlers
        self.target_logger = target_logger
        self._closed = False

    @classmethod
    def init(
        cls,
        service_name: str,
        config: Optional[TracingConfig] = None,
        stream: Optional[TextIO] = None,
        span_exporters: Optional[Iterable[SpanExporter]] = None,
        logger_name: str = "",
        set_global: bool = True
    ) -> "Tracing":
        """
        Initialize OpenTelemetry tracing and the span-context log output.

        Args:
            service_name: Name of the service (required).
            config: Tracing settings. Defaults to ``TracingConfig()``.
            stream: Destination of the log output. Defaults to stdout.
            span_exporters: Extra span exporters.
            logger_name: Logger the handlers are attached to. Defaults to
                the root logger.
            set_global: Register the provider as the global tracer provider.

        Returns:
            Tracing: The running pipeline.
        """
        config = (config or TracingConfig()).with_service_name(service_name)

        registry = ActiveSpanRegistry(record_threads=config.record_threads)
        provider = create_tracer_provider(config, registry, span_exporters)
        if set_global:
            trace.set_tracer_provider(provider)

        strategy = select_format(config)

        target_logger = logging.getLogger(logger_name)
        target_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

        # The span event must be recorded before the output handler formats it
        handlers: List[logging.Handler] = [SpanEventHandler()]
        output_handler = strategy.create_handler(registry, stream)
        if output_handler is not None:
            handlers.append(output_handler)
        for handler in handlers:
            target_logger.addHandler(handler)

        logger.debug("started tracer")
        return cls(config, provider, registry, strategy, handlers, target_logger)

    def tracer(self, name: Optional[str] = None) -> trace.Tracer:
        """Get a tracer from this pipeline's provider."""
        return self.provider.get_tracer(name or self.config.service_name)

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True

        logger.debug("stopping tracer")
        for handler in self.handlers:
            self.target_logger.removeHandler(handler)
            handler.close()
        self.provider.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False
