"""Append-only message history owned by a single session."""

from collections.abc import Iterable, Iterator

from agentstream.llm.types import ContentBlock, Message, Role, ToolResult


class MessageHistory:
    """Ordered, append-only sequence of turns.

    The caller's messages are copied at construction, so a running session
    never mutates the list it was given. Each round reads an immutable
    snapshot; round k+1 sees exactly round k's snapshot plus new turns.
    """

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: list[Message] = list(messages)

    def append(self, message: Message) -> Message:
        self._messages.append(message)
        return message

    def extend(self, messages: Iterable[Message]) -> None:
        for message in messages:
            self.append(message)

    def add_user_message(self, content: str | list[ContentBlock]) -> Message:
        return self.append(Message(role=Role.USER, content=content))

    def add_assistant_message(self, content: str | list[ContentBlock]) -> Message:
        return self.append(Message(role=Role.ASSISTANT, content=content))

    def add_tool_results(self, results: list[ToolResult]) -> Message:
        """Append one user turn carrying every result of a round, in order."""
        return self.add_user_message(list(results))

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __len__(self) -> int:
        return len(self._messages)


def from_plain(messages: Iterable[dict[str, str]]) -> MessageHistory:
    """Build a history from ``{"role": ..., "content": ...}`` dicts."""
    return MessageHistory(
        Message(role=Role(m["role"]), content=m["content"])
        for m in messages
    )
