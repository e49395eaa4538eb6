"""agentstream: stream LLM responses through multi-round tool use."""

from agentstream.core import (
    CancelToken,
    SessionCallbacks,
    SessionController,
    ToolUseStatus,
)
from agentstream.errors import AgentStreamError, RoundLimitError, TransportError
from agentstream.tools import ToolRegistry

__version__ = "0.1.0"

__all__ = [
    "AgentStreamError",
    "CancelToken",
    "RoundLimitError",
    "SessionCallbacks",
    "SessionController",
    "ToolRegistry",
    "ToolUseStatus",
    "TransportError",
    "__version__",
]
