"""LLM message types, stream events and round requests."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Message role."""

    USER = "user"
    ASSISTANT = "assistant"


class ContentBlockType(str, Enum):
    """Content block type."""

    TEXT = "text"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"


class StopReason(str, Enum):
    """Terminal classification of a round."""

    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    TRUNCATED = "truncated"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str | None) -> "StopReason":
        """Map a backend stop reason string onto a StopReason.

        The Messages API reports truncation as ``max_tokens``; anything
        unrecognised (``stop_sequence``, ``refusal``, None) is OTHER.
        """
        if raw == "max_tokens":
            return cls.TRUNCATED
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER


@dataclass
class TextContent:
    """Text content block."""

    text: str
    type: ContentBlockType = ContentBlockType.TEXT


@dataclass
class ToolUse:
    """Tool use request from LLM."""

    id: str
    name: str
    input: dict[str, Any]
    type: ContentBlockType = ContentBlockType.TOOL_USE


@dataclass
class ToolResult:
    """Tool execution result to send back to LLM."""

    tool_use_id: str
    content: str
    is_error: bool = False
    type: ContentBlockType = ContentBlockType.TOOL_RESULT

    @classmethod
    def success(cls, tool_use_id: str, content: str) -> "ToolResult":
        return cls(tool_use_id=tool_use_id, content=content, is_error=False)

    @classmethod
    def error(cls, tool_use_id: str, message: str) -> "ToolResult":
        return cls(tool_use_id=tool_use_id, content=message, is_error=True)


ContentBlock = TextContent | ToolUse | ToolResult


@dataclass
class Message:
    """A message in the conversation."""

    role: Role
    content: str | list[ContentBlock]

    def get_text(self) -> str:
        """Extract text content from message."""
        if isinstance(self.content, str):
            return self.content
        texts = [block.text for block in self.content if isinstance(block, TextContent)]
        return "".join(texts)

    def get_tool_uses(self) -> list[ToolUse]:
        """Extract tool use requests from message."""
        if isinstance(self.content, str):
            return []
        return [block for block in self.content if isinstance(block, ToolUse)]

    def get_tool_results(self) -> list[ToolResult]:
        if isinstance(self.content, str):
            return []
        return [block for block in self.content if isinstance(block, ToolResult)]


@dataclass
class ToolDefinition:
    """Tool definition for LLM."""

    name: str
    description: str
    input_schema: dict[str, Any]


@dataclass
class Usage:
    """Token usage information."""

    input_tokens: int
    output_tokens: int


# Stream events form a closed union: a backend yields any number of
# TextDelta / ToolCallStart events followed by exactly one RoundEnd.


@dataclass(frozen=True)
class TextDelta:
    """A fragment of generated text."""

    text: str


@dataclass(frozen=True)
class ToolCallStart:
    """The model started a tool-call block."""

    tool_use_id: str
    name: str


@dataclass(frozen=True)
class RoundEnd:
    """Terminal event of a round, carrying the complete assistant content."""

    stop_reason: StopReason
    final_blocks: tuple[ContentBlock, ...] = ()
    usage: Usage | None = None

    @property
    def tool_calls(self) -> list[ToolUse]:
        return [block for block in self.final_blocks if isinstance(block, ToolUse)]

    @property
    def text(self) -> str:
        return "".join(
            block.text for block in self.final_blocks if isinstance(block, TextContent)
        )


StreamEvent = TextDelta | ToolCallStart | RoundEnd


@dataclass(frozen=True)
class RoundRequest:
    """Everything a backend needs to open one round."""

    messages: tuple[Message, ...]
    tools: tuple[ToolDefinition, ...] = ()
    system: str | None = None
    model: str | None = None
    max_tokens: int = 8192
    metadata: dict[str, Any] = field(default_factory=dict)
