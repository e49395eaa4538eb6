"""Anthropic Claude backend."""

import logging
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING, Any

import anthropic

from agentstream.errors import TransportError
from agentstream.llm.base import LLMBackend
from agentstream.llm.retry import RetryConfig, with_retry
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

if TYPE_CHECKING:
    from agentstream.config.models import AgentStreamConfig

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


def convert_messages(
    messages: tuple[Message, ...] | list[Message],
) -> list[dict[str, Any]]:
    """Convert messages to the Messages API wire format."""
    result = []
    for msg in messages:
        content: str | list[dict[str, Any]]
        if isinstance(msg.content, str):
            content = msg.content
        else:
            content = []
            for block in msg.content:
                if isinstance(block, TextContent):
                    content.append({"type": "text", "text": block.text})
                elif isinstance(block, ToolUse):
                    content.append(
                        {
                            "type": "tool_use",
                            "id": block.id,
                            "name": block.name,
                            "input": block.input,
                        }
                    )
                elif isinstance(block, ToolResult):
                    content.append(
                        {
                            "type": "tool_result",
                            "tool_use_id": block.tool_use_id,
                            "content": block.content,
                            "is_error": block.is_error,
                        }
                    )

        result.append({"role": msg.role.value, "content": content})
    return result


def convert_tools(tools: tuple[ToolDefinition, ...]) -> list[dict[str, Any]]:
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.input_schema,
        }
        for tool in tools
    ]


def parse_content(blocks: Any) -> list[ContentBlock]:
    """Keep the text and tool_use blocks of an SDK message, dropping the rest."""
    content: list[ContentBlock] = []
    for block in blocks:
        if block.type == "text":
            content.append(TextContent(text=block.text))
        elif block.type == "tool_use":
            content.append(
                ToolUse(id=block.id, name=block.name, input=dict(block.input or {}))
            )
    return content


class AnthropicBackend(LLMBackend):
    """Backend speaking the Anthropic Messages API."""

    def __init__(
        self,
        client: anthropic.AsyncAnthropic | None = None,
        *,
        api_key: str | None = None,
        model: str | None = None,
        retry: RetryConfig | None = None,
    ):
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key)
        self._model = model or DEFAULT_MODEL
        self._retry = retry or RetryConfig()

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return self._model

    def _build_request_kwargs(self, request: RoundRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": request.model or self.default_model,
            "messages": convert_messages(request.messages),
            "max_tokens": request.max_tokens,
        }
        if request.system:
            kwargs["system"] = request.system
        if request.tools:
            kwargs["tools"] = convert_tools(request.tools)
        return kwargs

    async def open_stream(
        self, request: RoundRequest
    ) -> AsyncGenerator[StreamEvent, None]:
        kwargs = self._build_request_kwargs(request)
        logger.debug(
            "stream_open",
            extra={"model": kwargs["model"], "messages": len(kwargs["messages"])},
        )

        try:
            async with self._client.messages.stream(**kwargs) as stream:
                async for event in stream:
                    if event.type == "content_block_start":
                        if event.content_block.type == "tool_use":
                            yield ToolCallStart(
                                tool_use_id=event.content_block.id,
                                name=event.content_block.name,
                            )
                    elif event.type == "content_block_delta":
                        if event.delta.type == "text_delta":
                            yield TextDelta(text=event.delta.text)
                    # input_json_delta, thinking and helper events are
                    # covered by the final message below

                final = await stream.get_final_message()
        except anthropic.APIError as e:
            raise TransportError(f"Anthropic stream failed: {e}") from e

        logger.debug(
            "stream_complete",
            extra={
                "stop_reason": final.stop_reason,
                "input_tokens": final.usage.input_tokens,
                "output_tokens": final.usage.output_tokens,
            },
        )
        yield RoundEnd(
            stop_reason=StopReason.parse(final.stop_reason),
            final_blocks=tuple(parse_content(final.content)),
            usage=Usage(
                input_tokens=final.usage.input_tokens,
                output_tokens=final.usage.output_tokens,
            ),
        )

    async def complete(self, request: RoundRequest) -> Message:
        kwargs = self._build_request_kwargs(request)
        model_name = kwargs["model"]

        async def _make_request() -> anthropic.types.Message:
            return await self._client.messages.create(**kwargs)

        try:
            response = await with_retry(
                _make_request,
                config=self._retry,
                operation_name=f"Anthropic {model_name}",
            )
        except anthropic.APIError as e:
            raise TransportError(f"Anthropic request failed: {e}") from e

        return Message(role=Role.ASSISTANT, content=parse_content(response.content))


def create_backend(config: "AgentStreamConfig") -> AnthropicBackend:
    """Build an AnthropicBackend from loaded configuration."""
    client = anthropic.AsyncAnthropic(
        api_key=config.resolve_api_key(),
        base_url=config.anthropic.base_url,
    )
    return AnthropicBackend(
        client,
        model=config.session.model,
        retry=RetryConfig(max_retries=config.anthropic.max_retries),
    )
