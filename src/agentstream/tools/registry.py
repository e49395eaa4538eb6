"""Tool registry mapping tool names to async executors."""

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from agentstream.errors import ToolNotFoundError
from agentstream.llm.types import ToolDefinition

logger = logging.getLogger(__name__)

# An executor receives the tool input and returns any JSON-serializable value
ToolExecutorFn = Callable[[dict[str, Any]], Awaitable[Any]]

_EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


@dataclass(frozen=True)
class RegisteredTool:
    name: str
    executor: ToolExecutorFn
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=lambda: dict(_EMPTY_SCHEMA))

    def to_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
        )


class ToolRegistry:
    """Registry for tool executors.

    Populated by the caller before any session starts; sessions only read
    from it, so one registry can back many concurrent sessions.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register(
        self,
        name: str,
        executor: ToolExecutorFn,
        description: str = "",
        input_schema: dict[str, Any] | None = None,
    ) -> RegisteredTool:
        if name in self._tools:
            raise ValueError(f"Tool '{name}' already registered")
        tool = RegisteredTool(
            name=name,
            executor=executor,
            description=description,
            input_schema=input_schema or dict(_EMPTY_SCHEMA),
        )
        self._tools[name] = tool
        logger.debug(f"Registered tool: {name}")
        return tool

    def tool(
        self,
        name: str | None = None,
        *,
        description: str = "",
        input_schema: dict[str, Any] | None = None,
    ) -> Callable[[ToolExecutorFn], ToolExecutorFn]:
        """Decorator form of register(); defaults the name to the function name."""

        def decorator(fn: ToolExecutorFn) -> ToolExecutorFn:
            self.register(
                name or fn.__name__,
                fn,
                description=description or (fn.__doc__ or "").strip(),
                input_schema=input_schema,
            )
            return fn

        return decorator

    def get(self, name: str) -> RegisteredTool:
        # Exact, case-sensitive match
        if name not in self._tools:
            raise ToolNotFoundError(f"Tool '{name}' not found")
        return self._tools[name]

    def has(self, name: str) -> bool:
        return name in self._tools

    @property
    def names(self) -> list[str]:
        return list(self._tools.keys())

    def get_definitions(self) -> list[ToolDefinition]:
        return [tool.to_definition() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[RegisteredTool]:
        return iter(self._tools.values())
