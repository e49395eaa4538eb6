"""Session callback surface and lifecycle events."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class ToolUseStatus(str, Enum):
    """Lifecycle of one tool call as seen by the caller."""

    CALLING = "calling"
    COMPLETE = "complete"


@dataclass(frozen=True)
class TokenEvent:
    text: str


@dataclass(frozen=True)
class ToolUseEvent:
    name: str
    status: ToolUseStatus


@dataclass(frozen=True)
class CompleteEvent:
    full_text: str


@dataclass(frozen=True)
class ErrorEvent:
    error: Exception


SessionEvent = TokenEvent | ToolUseEvent | CompleteEvent | ErrorEvent


@dataclass
class SessionCallbacks:
    """Callbacks a caller supplies to observe a session.

    ``on_complete`` and ``on_error`` are mutually exclusive and each fires at
    most once. A cancelled session fires neither.
    """

    on_token: Callable[[str], None]
    on_complete: Callable[[str], None]
    on_error: Callable[[Exception], None]
    on_tool_use: Callable[[str, ToolUseStatus], None] | None = None

    def tool_use(self, name: str, status: ToolUseStatus) -> None:
        if self.on_tool_use is not None:
            self.on_tool_use(name, status)

    @classmethod
    def from_sink(cls, sink: Callable[[SessionEvent], None]) -> "SessionCallbacks":
        """Route every callback into a single event sink."""
        return cls(
            on_token=lambda text: sink(TokenEvent(text)),
            on_complete=lambda text: sink(CompleteEvent(text)),
            on_error=lambda error: sink(ErrorEvent(error)),
            on_tool_use=lambda name, status: sink(ToolUseEvent(name, status)),
        )
