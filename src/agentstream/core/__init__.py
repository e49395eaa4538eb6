"""Streaming session core."""

from agentstream.core.cancel import CancelToken, SessionCancelled
from agentstream.core.controller import RoundOutcome, SessionController
from agentstream.core.emitter import TokenEmitter
from agentstream.core.events import (
    CompleteEvent,
    ErrorEvent,
    SessionCallbacks,
    SessionEvent,
    TokenEvent,
    ToolUseEvent,
    ToolUseStatus,
)
from agentstream.core.history import MessageHistory, from_plain
from agentstream.core.state import SessionState
from agentstream.core.titles import generate_conversation_title

__all__ = [
    "CancelToken",
    "CompleteEvent",
    "ErrorEvent",
    "MessageHistory",
    "RoundOutcome",
    "SessionCallbacks",
    "SessionCancelled",
    "SessionController",
    "SessionEvent",
    "SessionState",
    "TokenEmitter",
    "TokenEvent",
    "ToolUseEvent",
    "ToolUseStatus",
    "from_plain",
    "generate_conversation_title",
]
