"""
Output format selection.

The output format is decided once at start-up. ``select_format`` turns the
configured ``TracingFormat`` into a frozen strategy object, which builds the
output handler for the process. Changing format requires a restart.
"""

import logging
from dataclasses import dataclass
from typing import Optional, TextIO

from spanlog.config.settings import FormatterConfig, TracingConfig, TracingFormat
from spanlog.core.registry import ActiveSpanRegistry
from spanlog.logging_helpers.formatters import (
    HierarchicalSpanFormatter,
    JsonSpanContextFormatter,
    PrettySpanFormatter,
)
from spanlog.logging_helpers.handlers import SpanContextStreamHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormatStrategy:
    """Base strategy: no output handler at all."""

    format: TracingFormat
    config: FormatterConfig

    def create_formatter(self, registry: ActiveSpanRegistry) -> Optional[logging.Formatter]:
        return None

    def create_handler(self, registry: ActiveSpanRegistry, stream: Optional[TextIO] = None) -> Optional[logging.Handler]:
        """
        Build the output handler for this format.

        Args:
            registry: Registry the formatter reads the span chain from
            stream: Destination stream, defaults to stdout

        Returns:
            logging.Handler, or None for the disabled format
        """
        formatter = self.create_formatter(registry)
        if formatter is None:
            return None
        handler = SpanContextStreamHandler(stream)
        handler.setFormatter(formatter)
        return handler


@dataclass(frozen=True)
class DisabledFormat(FormatStrategy):
    pass


@dataclass(frozen=True)
class HierarchicalFormat(FormatStrategy):
    indent_amount: int = 2

    def create_formatter(self, registry):
        return HierarchicalSpanFormatter(registry, self.config, indent_amount=self.indent_amount)


@dataclass(frozen=True)
class PrettyFormat(FormatStrategy):
    def create_formatter(self, registry):
        return PrettySpanFormatter(registry, self.config)


@dataclass(frozen=True)
class StructuredFormat(FormatStrategy):
    indent: Optional[int] = None

    def create_formatter(self, registry):
        return JsonSpanContextFormatter(registry, self.config, indent=self.indent)


def select_format(config: TracingConfig) -> FormatStrategy:
    """
    Choose the output strategy for the configured format.

    Args:
        config: Start-up tracing settings

    Returns:
        FormatStrategy: Immutable strategy for the process lifetime
    """
    formatter_config = config.formatter_config()
    selected = config.format

    if selected is TracingFormat.NONE:
        strategy = DisabledFormat(selected, formatter_config)
    elif selected is TracingFormat.HIERARCHICAL:
        strategy = HierarchicalFormat(selected, formatter_config)
    elif selected is TracingFormat.PRETTY:
        strategy = PrettyFormat(selected, formatter_config)
    elif selected is TracingFormat.JSON:
        strategy = StructuredFormat(selected, formatter_config)
    else:
        strategy = StructuredFormat(selected, formatter_config, indent=2)

    logger.debug(f"Selected output format: {selected.value}")
    return strategy
