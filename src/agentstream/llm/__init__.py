"""LLM backend abstraction layer."""

from agentstream.llm.anthropic import AnthropicBackend, create_backend
from agentstream.llm.base import LLMBackend
from agentstream.llm.retry import RetryConfig, is_retryable_error, with_retry
from agentstream.llm.types import (
    ContentBlock,
    Message,
    Role,
    RoundEnd,
    RoundRequest,
    StopReason,
    StreamEvent,
    TextContent,
    TextDelta,
    ToolCallStart,
    ToolDefinition,
    ToolResult,
    ToolUse,
    Usage,
)

__all__ = [
    # Backends
    "AnthropicBackend",
    "LLMBackend",
    "create_backend",
    # Retry
    "RetryConfig",
    "is_retryable_error",
    "with_retry",
    # Types
    "ContentBlock",
    "Message",
    "Role",
    "RoundEnd",
    "RoundRequest",
    "StopReason",
    "StreamEvent",
    "TextContent",
    "TextDelta",
    "ToolCallStart",
    "ToolDefinition",
    "ToolResult",
    "ToolUse",
    "Usage",
]
