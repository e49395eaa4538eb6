"""Configuration module."""

from agentstream.config.loader import load_config
from agentstream.config.models import (
    AgentStreamConfig,
    AnthropicConfig,
    ConfigError,
    SessionConfig,
)
from agentstream.config.paths import get_config_path, get_home

__all__ = [
    "AgentStreamConfig",
    "AnthropicConfig",
    "ConfigError",
    "SessionConfig",
    "get_config_path",
    "get_home",
    "load_config",
]
