"""Conversation title generation."""

import logging
import re

from agentstream.llm.base import LLMBackend
from agentstream.llm.types import Message, Role, RoundRequest

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"
TITLE_CONTEXT_MESSAGES = 6
TITLE_SNIPPET_CHARS = 200
TITLE_MAX_TOKENS = 50

_QUOTES = re.compile(r"^[\"']|[\"']$")

NEW_TITLE_PROMPT = """Generate a very short (2-5 words) title for this conversation. \
Focus on what the user is trying to build or understand. \
Just respond with the title, nothing else.

Conversation:
{summary}"""

UPDATE_TITLE_PROMPT = """The conversation title is currently "{current}". \
Based on the latest context, generate a more specific title (2-5 words). \
If the current title is already good, respond with exactly that title. \
Just respond with the title, nothing else.

Recent conversation:
{summary}"""


def _fallback_title(messages: list[Message], current_title: str | None) -> str:
    if current_title:
        return current_title
    if messages and (first := messages[0].get_text()):
        return first[:30]
    return DEFAULT_TITLE


def summarize_for_title(messages: list[Message]) -> str:
    lines = []
    for msg in messages[-TITLE_CONTEXT_MESSAGES:]:
        speaker = "User" if msg.role == Role.USER else "Assistant"
        lines.append(f"{speaker}: {msg.get_text()[:TITLE_SNIPPET_CHARS]}")
    return "\n\n".join(lines)


async def generate_conversation_title(
    backend: LLMBackend,
    messages: list[Message],
    current_title: str | None = None,
    model: str | None = None,
) -> str:
    """Ask the backend for a short title describing the conversation.

    Falls back to the current title, then the opening of the first message,
    then "New Chat" when the backend fails or returns no text.
    """
    summary = summarize_for_title(messages)
    is_update = (
        current_title is not None
        and current_title != DEFAULT_TITLE
        and len(messages) > 2
    )
    prompt = (
        UPDATE_TITLE_PROMPT.format(current=current_title, summary=summary)
        if is_update
        else NEW_TITLE_PROMPT.format(summary=summary)
    )

    request = RoundRequest(
        messages=(Message(role=Role.USER, content=prompt),),
        model=model,
        max_tokens=TITLE_MAX_TOKENS,
    )
    try:
        response = await backend.complete(request)
    except Exception:
        logger.warning("title_generation_failed", exc_info=True)
        return _fallback_title(messages, current_title)

    title = _QUOTES.sub("", response.get_text().strip())
    return title or _fallback_title(messages, current_title)
