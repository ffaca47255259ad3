"""
Configuration management for the spanlog package.

This package provides functionality for loading the layered configuration and
turning it into the immutable settings used by the tracing pipeline.
"""

from spanlog.config.loader import ConfigurationError, load_config, find_and_load_config
from spanlog.config.settings import FormatterConfig, TracingConfig, TracingFormat

__all__ = [
    'ConfigurationError',
    'load_config',
    'find_and_load_config',
    'FormatterConfig',
    'TracingConfig',
    'TracingFormat',
]
