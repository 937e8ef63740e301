"""
Comparator configuration module.
This module loads the settings shared by both protocol clients from a YAML
file and the environment.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

from mcp_fingerprint.core.protocol_client import (
    DEFAULT_CLIENT_NAME,
    DEFAULT_CLIENT_VERSION,
    DEFAULT_PROTOCOL_VERSION,
    DEFAULT_SESSION_HEADERS,
    DEFAULT_TIMEOUT,
    SessionIdSource,
)
from mcp_fingerprint.error_handling.exceptions import ConfigurationError

DEFAULT_ENDPOINT1 = "http://localhost:8080/mcp"
DEFAULT_ENDPOINT2 = "http://localhost:8081/mcp"

# Environment variable -> config key
ENV_OVERRIDES = {
    "MCP_COMPARE_ENDPOINT1": "endpoint1",
    "MCP_COMPARE_ENDPOINT2": "endpoint2",
    "MCP_COMPARE_TIMEOUT": "timeout",
    "MCP_COMPARE_SESSION_SOURCE": "session_id_source",
    "MCP_COMPARE_LOG_LEVEL": "log_level",
}

@dataclass
class ComparatorConfig:
    """Configuration for comparing two MCP servers."""
    endpoint1: str = DEFAULT_ENDPOINT1
    endpoint2: str = DEFAULT_ENDPOINT2
    timeout: float = DEFAULT_TIMEOUT
    session_id_source: SessionIdSource = SessionIdSource.HEADER
    session_header: Optional[str] = None
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    client_name: str = DEFAULT_CLIENT_NAME
    client_version: str = DEFAULT_CLIENT_VERSION
    sort_nested_keys: bool = True
    log_level: str = "INFO"
    logging: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        try:
            self.timeout = float(self.timeout)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid timeout: {self.timeout!r}", original_exception=e)
        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout}")

        try:
            self.session_id_source = SessionIdSource(self.session_id_source)
        except ValueError as e:
            valid = ", ".join(source.value for source in SessionIdSource)
            raise ConfigurationError(
                f"Unknown session_id_source {self.session_id_source!r} (expected one of: {valid})",
                original_exception=e,
            )
        if not self.session_header:
            self.session_header = DEFAULT_SESSION_HEADERS[self.session_id_source]
        self.log_level = str(self.log_level).upper()
        if self.logging is not None:
            _validate_logging(self.logging)


def _validate_logging(logging_config: Any) -> None:
    """Check the shape setup_logging_from_config relies on."""
    if not isinstance(logging_config, dict):
        raise ConfigurationError(f"'logging' must be a mapping, got {type(logging_config).__name__}")
    handlers = logging_config.get("handlers")
    if handlers is None:
        return
    if not isinstance(handlers, list):
        raise ConfigurationError("'logging.handlers' must be a list")
    for index, handler in enumerate(handlers):
        if not isinstance(handler, dict):
            raise ConfigurationError(f"'logging.handlers[{index}]' must be a mapping")
        if not handler.get("type"):
            raise ConfigurationError(f"'logging.handlers[{index}]' is missing 'type'")
        if handler["type"] == "FileHandler" and not handler.get("filename"):
            raise ConfigurationError(f"'logging.handlers[{index}]' FileHandler requires 'filename'")


def load_config(config_path: Optional[str] = None, **overrides) -> ComparatorConfig:
    """
    Load configuration from an optional YAML file, then the environment.

    Args:
        config_path: Path to the configuration file
        **overrides: Explicit values (e.g. from the command line) applied
            last; None values are ignored.

    Returns:
        ComparatorConfig object with loaded configuration

    Raises:
        FileNotFoundError: If the configuration file doesn't exist
        ConfigurationError: If the file or a value is invalid
    """
    config_data: Dict[str, Any] = {}
    if config_path:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with open(config_path, 'r') as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_path}", original_exception=e)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Configuration in {config_path} must be a mapping")
        config_data.update(loaded)

    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            config_data[key] = value

    config_data.update({key: value for key, value in overrides.items() if value is not None})

    known = {f.name for f in fields(ComparatorConfig)}
    unknown = sorted(set(config_data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    return ComparatorConfig(**config_data)
