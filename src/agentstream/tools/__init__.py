"""Tool registry and dispatch."""

from agentstream.tools.builtin import register_builtin_tools
from agentstream.tools.dispatcher import TOOL_NOT_FOUND, ToolDispatcher
from agentstream.tools.registry import RegisteredTool, ToolExecutorFn, ToolRegistry

__all__ = [
    "TOOL_NOT_FOUND",
    "RegisteredTool",
    "ToolDispatcher",
    "ToolExecutorFn",
    "ToolRegistry",
    "register_builtin_tools",
]
