"""
Configuration loading and management for spanlog.

This module provides functions to load the layered configuration of the
tracing pipeline: built-in defaults, an optional configuration file and
environment variables.
"""

import copy
import os
import json
import yaml
import logging
import importlib.util
from pathlib import Path
from typing import Dict, Any, Optional, List

# Default configuration
DEFAULT_CONFIG = {
    "service": {
        "name": "unnamed-service",
    },
    "core": {
        "no_color": False,
    },
    "tracing": {
        "disable_opentelemetry": False,
        "opentelemetry_endpoint": "http://localhost:4317",
        "log_level": "DEBUG",
        "format": "pretty",
        "namespace_separator": ".",
        "record_threads": True,
    },
    "metrics": {
        "enabled": True,
        "exporters": ["console"],
        "export_interval_millis": 30000,
    },
}

ENV_PREFIX = "SPANLOG_"

# Keys whose environment values are comma separated lists
LIST_KEYS = frozenset([
    ("metrics", "exporters"),
])

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised for configuration errors."""
    pass


def deep_merge(source: Dict[str, Any], destination: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        source: Source dictionary
        destination: Destination dictionary (will be modified)

    Returns:
        dict: Merged dictionary
    """
    for key, value in source.items():
        if isinstance(value, dict):
            node = destination.setdefault(key, {})
            if isinstance(node, dict):
                deep_merge(value, node)
            else:
                destination[key] = value
        else:
            destination[key] = value

    return destination


def _parse_env_value(value: str, as_list: bool = False) -> Any:
    if as_list:
        return [part.strip() for part in value.split(",") if part.strip()]

    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    # "none" is not mapped to None, it is also a tracing format name
    if value.isdigit():
        return int(value)
    if value.replace(".", "", 1).isdigit() and value.count(".") == 1:
        return float(value)
    return value


def _load_from_env(prefix: str = ENV_PREFIX, environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Environment variables should be prefixed with the specified prefix.
    Nested keys should be separated by double underscores.

    Examples:
        SPANLOG_SERVICE__NAME=orders
        SPANLOG_TRACING__FORMAT=json
        SPANLOG_TRACING__DISABLE_OPENTELEMETRY=true
        SPANLOG_METRICS__EXPORTERS=console,otlp

    Args:
        prefix: Prefix for environment variables
        environ: Mapping to read instead of ``os.environ``

    Returns:
        dict: Configuration from environment variables
    """
    config: Dict[str, Any] = {}
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(prefix) or key == f"{prefix}CONFIG":
            continue

        key_path = key[len(prefix):].lower().split("__")
        value = _parse_env_value(value, as_list=tuple(key_path) in LIST_KEYS)

        current = config
        for i, part in enumerate(key_path):
            if i == len(key_path) - 1:
                current[part] = value
            else:
                current = current.setdefault(part, {})

    return config


def _load_from_file(file_path: str) -> Dict[str, Any]:
    """
    Load configuration from a file.

    Supports JSON, YAML, and Python files.

    Args:
        file_path: Path to the configuration file

    Returns:
        dict: Configuration from the file

    Raises:
        ConfigurationError: If the file is not found or has an unsupported format
    """
    path = Path(file_path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    suffix = path.suffix.lower()
    if suffix not in (".json", ".yaml", ".yml", ".py"):
        raise ConfigurationError(f"Unsupported configuration file format: {suffix}")

    try:
        if suffix == ".json":
            with open(path) as f:
                return json.load(f) or {}
        elif suffix in (".yaml", ".yml"):
            with open(path) as f:
                return yaml.safe_load(f) or {}
        else:
            module_name = path.stem
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ConfigurationError(f"Cannot load Python config: {file_path}")

            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)

            # Module level names become top level sections
            config = {}
            for key, value in module.__dict__.items():
                if not key.startswith("_"):
                    config[key.lower()] = value

            return config
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Error loading configuration from {file_path}: {str(e)}")


def load_config(
    config_path: Optional[str] = None,
    env_prefix: str = ENV_PREFIX,
    merge_env: bool = True,
    environ: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Load configuration from multiple sources.

    Priority (highest to lowest):
    1. Environment variables (if merge_env is True)
    2. Configuration file (if provided)
    3. Default configuration

    Args:
        config_path: Path to configuration file
        env_prefix: Prefix for environment variables
        merge_env: Whether to merge environment variables
        environ: Mapping to read instead of ``os.environ``

    Returns:
        dict: Merged configuration
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        try:
            file_config = _load_from_file(config_path)
            config = deep_merge(file_config, config)
            logger.info(f"Loaded configuration from file: {config_path}")
        except ConfigurationError as e:
            logger.warning(str(e))

    if merge_env:
        env_config = _load_from_env(env_prefix, environ)
        if env_config:
            config = deep_merge(env_config, config)
            logger.info("Merged configuration from environment variables")

    return config


def find_and_load_config(
    search_paths: List[str] = None,
    filenames: List[str] = None,
    env_prefix: str = ENV_PREFIX,
    merge_env: bool = True,
    environ: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Search for and load a configuration file.

    Default search paths:
    - Current directory
    - User's home directory
    - /etc/spanlog

    Default filenames:
    - spanlog.json
    - spanlog.yaml
    - spanlog.yml
    - spanlog.py

    Args:
        search_paths: List of directories to search
        filenames: List of filenames to try
        env_prefix: Prefix for environment variables
        merge_env: Whether to merge environment variables
        environ: Mapping to read instead of ``os.environ``

    Returns:
        dict: Loaded configuration
    """
    environ = os.environ if environ is None else environ
    search_paths = search_paths or [
        ".",
        str(Path.home()),
        "/etc/spanlog"
    ]

    filenames = filenames or [
        "spanlog.json",
        "spanlog.yaml",
        "spanlog.yml",
        "spanlog.py"
    ]

    env_config_path = environ.get(f"{env_prefix}CONFIG")
    if env_config_path:
        return load_config(env_config_path, env_prefix, merge_env, environ)

    for path in search_paths:
        for name in filenames:
            config_path = os.path.join(path, name)
            if os.path.exists(config_path):
                return load_config(config_path, env_prefix, merge_env, environ)

    return load_config(None, env_prefix, merge_env, environ)
