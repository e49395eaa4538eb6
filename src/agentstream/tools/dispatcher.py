"""Tool dispatch with logging and error conversion."""

import json
import logging
import time
from typing import Any

from agentstream.errors import ToolNotFoundError
from agentstream.llm.types import ToolResult, ToolUse
from agentstream.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

TOOL_NOT_FOUND = "Error: tool not found"


def serialize_result(value: Any) -> str:
    """Serialize a tool's return value for the model."""
    return json.dumps(value, indent=2, default=str)


class ToolDispatcher:
    """Resolves tool calls against a registry and runs them.

    Failures never escape: an unknown tool or an executor exception becomes
    an error-flagged ToolResult so the model can react to it.
    """

    def __init__(self, registry: ToolRegistry):
        self._registry = registry

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, tool_call: ToolUse) -> ToolResult:
        try:
            tool = self._registry.get(tool_call.name)
        except ToolNotFoundError:
            logger.error(
                "tool_not_found",
                extra={"gen_ai.tool.name": tool_call.name, "error.type": "KeyError"},
            )
            return ToolResult.error(tool_call.id, TOOL_NOT_FOUND)

        logger.debug(f"Tool {tool_call.name} input: {tool_call.input}")

        start_time = time.monotonic()
        try:
            value = await tool.executor(tool_call.input)
            # Unserializable values (tuple keys, cycles) fail like the tool did
            content = serialize_result(value)
        except Exception as e:
            logger.exception(
                "tool_execution_failed", extra={"gen_ai.tool.name": tool_call.name}
            )
            result = ToolResult.error(tool_call.id, f"Error: {e}")
        else:
            result = ToolResult.success(tool_call.id, content)

        duration_ms = int((time.monotonic() - start_time) * 1000)
        log_extra: dict[str, Any] = {
            "gen_ai.tool.name": tool_call.name,
            "gen_ai.tool.call.id": tool_call.id,
            "duration_ms": duration_ms,
        }
        if result.is_error:
            log_extra["error.message"] = result.content[:500]
            logger.error("tool_executed", extra=log_extra)
        else:
            logger.info("tool_executed", extra=log_extra)
            logger.debug(f"Tool {tool_call.name} result: {result.content[:200]}")

        return result

