"""
Immutable runtime settings for spanlog.

The layered configuration dict produced by ``spanlog.config.loader`` is
converted once, at start-up, into the frozen values defined here. Formatters
and handlers receive these values at construction and never read global
state afterwards.
"""

import enum
from dataclasses import dataclass, replace
from typing import Any, Dict

from spanlog.config.loader import ConfigurationError


class TracingFormat(enum.Enum):
    """Output formats a process can be started with."""

    NONE = "none"
    HIERARCHICAL = "hierarchical"
    PRETTY = "pretty"
    JSON = "json"
    JSON_PRETTY = "json_pretty"

    @classmethod
    def parse(cls, value: Any) -> "TracingFormat":
        """
        Parse a format name, accepting ``-`` in place of ``_``.

        Raises:
            ConfigurationError: If the name is not a known format
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower().replace("-", "_")
        for member in cls:
            if member.value == name:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ConfigurationError(f"Unknown tracing format: {value!r} (expected one of {choices})")


@dataclass(frozen=True)
class FormatterConfig:
    """
    Settings read by the span-context formatters on every record.

    Attributes:
        service_name: Name of the instrumented service, used for the
            ``from_service`` flag
        namespace_separator: Token separating the segments of a target or
            span name
        no_color: Disable ANSI colours in the human readable formats
    """

    service_name: str = "unnamed-service"
    namespace_separator: str = "."
    no_color: bool = False


@dataclass(frozen=True)
class TracingConfig:
    """Start-up settings for the tracing pipeline."""

    service_name: str = "unnamed-service"
    format: TracingFormat = TracingFormat.PRETTY
    log_level: str = "DEBUG"
    disable_opentelemetry: bool = False
    opentelemetry_endpoint: str = "http://localhost:4317"
    namespace_separator: str = "."
    record_threads: bool = True
    no_color: bool = False

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "TracingConfig":
        """
        Build the settings from a loaded configuration dictionary.

        Args:
            config: Configuration as returned by ``load_config``

        Returns:
            TracingConfig

        Raises:
            ConfigurationError: If the output format is unknown
        """
        service_config = config.get("service", {}) or {}
        tracing_config = config.get("tracing", {}) or {}
        core_config = config.get("core", {}) or {}

        return cls(
            service_name=str(service_config.get("name", cls.service_name)),
            format=TracingFormat.parse(tracing_config.get("format", cls.format)),
            log_level=str(tracing_config.get("log_level", cls.log_level)).upper(),
            disable_opentelemetry=bool(tracing_config.get("disable_opentelemetry", False)),
            opentelemetry_endpoint=str(
                tracing_config.get("opentelemetry_endpoint", cls.opentelemetry_endpoint)
            ),
            namespace_separator=str(
                tracing_config.get("namespace_separator", cls.namespace_separator)
            ),
            record_threads=bool(tracing_config.get("record_threads", True)),
            no_color=bool(core_config.get("no_color", False)),
        )

    def with_service_name(self, service_name: str) -> "TracingConfig":
        return replace(self, service_name=service_name)

    def formatter_config(self) -> FormatterConfig:
        return FormatterConfig(
            service_name=self.service_name,
            namespace_separator=self.namespace_separator,
            no_color=self.no_color,
        )
