"""Abstract LLM backend interface."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from agentstream.llm.types import Message, RoundRequest, StreamEvent


class LLMBackend(ABC):
    """Abstract interface for LLM backends.

    A backend is passed explicitly to whatever drives it, so tests can swap
    in scripted doubles and concurrent sessions can share one client.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g., 'anthropic')."""
        ...

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when a request does not name one."""
        ...

    @abstractmethod
    def open_stream(self, request: RoundRequest) -> AsyncIterator[StreamEvent]:
        """Open one round against the backend.

        Args:
            request: Conversation so far plus round parameters.

        Yields:
            TextDelta and ToolCallStart events in arrival order, then exactly
            one RoundEnd. Closing the iterator early aborts the transport.

        Raises:
            TransportError: If the stream fails before RoundEnd.
        """
        ...

    @abstractmethod
    async def complete(self, request: RoundRequest) -> Message:
        """Generate a single non-streaming assistant message.

        Args:
            request: Conversation plus request parameters.

        Returns:
            The assistant message.
        """
        ...
