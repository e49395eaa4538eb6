"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError

from agentstream.config.models import AgentStreamConfig, ConfigError
from agentstream.config.paths import get_config_path

API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("agentstream.toml"),  # Current directory
        get_config_path(),  # ~/.agentstream/config.toml (or AGENTSTREAM_HOME)
    ]


def _resolve_env_secrets(config: dict[str, Any]) -> dict[str, Any]:
    section = config.setdefault("anthropic", {})
    if section.get("api_key") is None:
        if value := os.environ.get(API_KEY_ENV_VAR):
            section["api_key"] = SecretStr(value)
    return config


def load_config(path: Path | None = None) -> AgentStreamConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default
            locations and falls back to defaults when none exists.

    Returns:
        Validated AgentStreamConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigError: If the file is not valid TOML or fails validation.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        try:
            with config_path.open("rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _resolve_env_secrets(raw_config)

    try:
        return AgentStreamConfig.model_validate(raw_config)
    except ValidationError as e:
        source = config_path or "environment"
        raise ConfigError(f"Invalid configuration ({source}): {e}") from e
