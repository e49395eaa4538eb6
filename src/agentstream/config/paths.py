"""Path management for agentstream.

The base directory defaults to ~/.agentstream and can be overridden with the
AGENTSTREAM_HOME environment variable.
"""

import os
from pathlib import Path

ENV_VAR = "AGENTSTREAM_HOME"


def get_home() -> Path:
    """Get the base directory for agentstream data."""
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser()
    return Path.home() / ".agentstream"


def get_config_path() -> Path:
    return get_home() / "config.toml"
