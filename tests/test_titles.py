"""Tests for conversation title generation."""

import pytest

from agentstream.core.titles import (
    DEFAULT_TITLE,
    TITLE_MAX_TOKENS,
    generate_conversation_title,
    summarize_for_title,
)
from agentstream.errors import TransportError
from agentstream.llm.types import Message, Role, TextContent
from tests.conftest import ScriptedBackend, make_message


def _reply(text: str) -> Message:
    return Message(role=Role.ASSISTANT, content=[TextContent(text=text)])


def _conversation(n: int) -> list[Message]:
    roles = [Role.USER, Role.ASSISTANT]
    return [make_message(roles[i % 2], f"message {i}") for i in range(n)]


class TestSummarizeForTitle:
    def test_labels_speakers(self):
        summary = summarize_for_title(_conversation(2))
        assert summary == "User: message 0\n\nAssistant: message 1"

    def test_uses_recent_messages_only(self):
        summary = summarize_for_title(_conversation(10))
        assert "message 3" not in summary
        assert summary.startswith("User: message 4")

    def test_truncates_long_messages(self):
        summary = summarize_for_title([make_message(content="x" * 500)])
        assert summary == "User: " + "x" * 200


class TestGenerateConversationTitle:
    """Tests for generate_conversation_title."""

    @pytest.mark.asyncio
    async def test_new_title(self):
        backend = ScriptedBackend(completions=[_reply('"Trip Planning"')])

        title = await generate_conversation_title(
            backend, [make_message(content="Help me plan a trip")], model="fast"
        )

        assert title == "Trip Planning"
        request = backend.complete_requests[0]
        assert request.max_tokens == TITLE_MAX_TOKENS
        assert request.model == "fast"
        prompt = request.messages[0].get_text()
        assert "Generate a very short" in prompt
        assert "User: Help me plan a trip" in prompt

    @pytest.mark.asyncio
    async def test_update_prompt_for_longer_conversations(self):
        backend = ScriptedBackend(completions=[_reply("Kyoto Itinerary")])

        title = await generate_conversation_title(
            backend, _conversation(4), current_title="Trip Planning"
        )

        assert title == "Kyoto Itinerary"
        prompt = backend.complete_requests[0].messages[0].get_text()
        assert 'currently "Trip Planning"' in prompt

    @pytest.mark.asyncio
    async def test_default_title_is_not_updated(self):
        backend = ScriptedBackend(completions=[_reply("Something")])

        await generate_conversation_title(
            backend, _conversation(4), current_title=DEFAULT_TITLE
        )

        prompt = backend.complete_requests[0].messages[0].get_text()
        assert "Generate a very short" in prompt

    @pytest.mark.asyncio
    async def test_failure_keeps_current_title(self):
        backend = ScriptedBackend(completions=[TransportError("down")])

        title = await generate_conversation_title(
            backend, _conversation(4), current_title="Trip Planning"
        )

        assert title == "Trip Planning"

    @pytest.mark.asyncio
    async def test_failure_uses_first_message(self):
        backend = ScriptedBackend(completions=[TransportError("down")])
        messages = [make_message(content="How do I configure a reverse proxy?")]

        title = await generate_conversation_title(backend, messages)

        assert title == "How do I configure a reverse p"

    @pytest.mark.asyncio
    async def test_empty_reply_without_messages(self):
        backend = ScriptedBackend(completions=[_reply("  ")])

        assert await generate_conversation_title(backend, []) == DEFAULT_TITLE
