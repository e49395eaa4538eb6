"""Exception types raised by agentstream."""


class AgentStreamError(Exception):
    """Base class for agentstream errors."""


class TransportError(AgentStreamError):
    """The backend stream failed mid-round (network or API error)."""


class RoundLimitError(AgentStreamError):
    """A session ran more rounds than its configured limit."""

    def __init__(self, max_rounds: int):
        self.max_rounds = max_rounds
        super().__init__(f"Session exceeded {max_rounds} rounds")


class ToolNotFoundError(AgentStreamError, KeyError):
    """No executor is registered under the requested tool name."""
