"""Shared test fixtures and factories."""

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest

from agentstream.config.models import AgentStreamConfig, SessionConfig
from agentstream.core.events import SessionCallbacks, ToolUseStatus
from agentstream.llm.base import LLMBackend
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
    ToolUse,
)
from agentstream.tools.registry import ToolRegistry

# Marker inside a scripted round: block until the stream is cancelled
HANG = object()

# =============================================================================
# Backend doubles
# =============================================================================


class ScriptedBackend(LLMBackend):
    """Backend that replays pre-scripted rounds.

    Each round is a list of StreamEvents; an Exception instance in the list
    is raised at that point, and HANG blocks until the stream is closed.
    """

    def __init__(
        self,
        rounds: list[list[Any]] | None = None,
        completions: list[Message | Exception] | None = None,
    ):
        self.rounds = list(rounds or [])
        self.completions = list(completions or [])
        self.requests: list[RoundRequest] = []
        self.complete_requests: list[RoundRequest] = []
        self.closed_rounds = 0
        self.hanging = asyncio.Event()

    @property
    def name(self) -> str:
        return "scripted"

    @property
    def default_model(self) -> str:
        return "scripted-model"

    async def open_stream(
        self, request: RoundRequest
    ) -> AsyncGenerator[StreamEvent, None]:
        self.requests.append(request)
        index = len(self.requests) - 1
        if index >= len(self.rounds):
            raise AssertionError(f"Unexpected round {index + 1}")
        try:
            for item in self.rounds[index]:
                if item is HANG:
                    self.hanging.set()
                    await asyncio.Event().wait()
                elif isinstance(item, Exception):
                    raise item
                else:
                    await asyncio.sleep(0)
                    yield item
        finally:
            self.closed_rounds += 1

    async def complete(self, request: RoundRequest) -> Message:
        self.complete_requests.append(request)
        if not self.completions:
            return Message(role=Role.ASSISTANT, content=[TextContent(text="Mock")])
        response = self.completions.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


# =============================================================================
# Round factories
# =============================================================================


def text_round(*deltas: str, stop: StopReason = StopReason.END_TURN) -> list[Any]:
    """A round that streams ``deltas`` and ends with ``stop``."""
    text = "".join(deltas)
    blocks: tuple[ContentBlock, ...] = (TextContent(text=text),) if text else ()
    return [
        *(TextDelta(text=d) for d in deltas),
        RoundEnd(stop_reason=stop, final_blocks=blocks),
    ]


def tool_round(*calls: ToolUse, text: str = "", announce: bool = True) -> list[Any]:
    """A round that optionally streams ``text`` then requests ``calls``."""
    events: list[Any] = []
    blocks: list[ContentBlock] = []
    if text:
        events.append(TextDelta(text=text))
        blocks.append(TextContent(text=text))
    for call in calls:
        if announce:
            events.append(ToolCallStart(tool_use_id=call.id, name=call.name))
        blocks.append(call)
    events.append(RoundEnd(stop_reason=StopReason.TOOL_USE, final_blocks=tuple(blocks)))
    return events


def make_tool_use(
    id: str = "toolu_1",
    name: str = "lookup",
    input: dict[str, Any] | None = None,
) -> ToolUse:
    return ToolUse(id=id, name=name, input=input or {})


def make_message(
    role: Role = Role.USER,
    content: str | list[ContentBlock] = "Hello",
) -> Message:
    return Message(role=role, content=content)


# =============================================================================
# Callback recorder
# =============================================================================


class RecordingCallbacks:
    """Collects every callback invocation in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    @property
    def callbacks(self) -> SessionCallbacks:
        return SessionCallbacks(
            on_token=lambda text: self.calls.append(("token", text)),
            on_complete=lambda text: self.calls.append(("complete", text)),
            on_error=lambda e: self.calls.append(("error", e)),
            on_tool_use=lambda name, status: self.calls.append(
                ("tool_use", (name, status))
            ),
        )

    @property
    def tokens(self) -> list[str]:
        return [value for kind, value in self.calls if kind == "token"]

    @property
    def completions(self) -> list[str]:
        return [value for kind, value in self.calls if kind == "complete"]

    @property
    def errors(self) -> list[Exception]:
        return [value for kind, value in self.calls if kind == "error"]

    @property
    def tool_uses(self) -> list[tuple[str, ToolUseStatus]]:
        return [value for kind, value in self.calls if kind == "tool_use"]


@pytest.fixture
def recorder() -> RecordingCallbacks:
    return RecordingCallbacks()


# =============================================================================
# Tools
# =============================================================================


@pytest.fixture
def tool_registry() -> ToolRegistry:
    """Registry with a `lookup` tool returning {"ok": true} and a failing tool."""
    registry = ToolRegistry()

    async def lookup(input_data: dict[str, Any]) -> dict[str, Any]:
        return {"ok": True}

    async def explode(input_data: dict[str, Any]) -> Any:
        raise RuntimeError("boom")

    registry.register("lookup", lookup, description="Look something up")
    registry.register("explode", explode, description="Always fails")
    return registry


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(model="test-model", max_tokens=1024)


@pytest.fixture
def minimal_config() -> AgentStreamConfig:
    return AgentStreamConfig()


@pytest.fixture
def config_toml_content() -> str:
    return """
log_level = "DEBUG"

[anthropic]
api_key = "sk-ant-REDACTED"

[session]
model = "claude-sonnet-4-20250514"
max_tokens = 2048
max_continuations = 2
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
