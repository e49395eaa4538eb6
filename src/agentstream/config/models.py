"""Configuration models using Pydantic."""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr

DEFAULT_CONTINUATION_PROMPT = "Continue where you left off."
DEFAULT_MAX_ROUNDS = 25
DEFAULT_MAX_CONTINUATIONS = 5


class ConfigError(Exception):
    """Configuration error."""


class AnthropicConfig(BaseModel):
    """Anthropic backend configuration."""

    api_key: SecretStr | None = None
    base_url: str | None = None
    max_retries: int = Field(default=3, ge=0)


class SessionConfig(BaseModel):
    """Parameters for one streaming session.

    ``max_continuations`` bounds how many times a truncated round is resumed;
    once exhausted the session completes with the text generated so far.
    ``max_rounds`` bounds every round (tool use included); exceeding it is an
    error.
    """

    model: str | None = None  # None = backend default
    max_tokens: int = Field(default=8192, gt=0)
    system_prompt: str | None = None
    continuation_prompt: str = DEFAULT_CONTINUATION_PROMPT
    max_continuations: int = Field(default=DEFAULT_MAX_CONTINUATIONS, ge=0)
    max_rounds: int = Field(default=DEFAULT_MAX_ROUNDS, ge=1)


class AgentStreamConfig(BaseModel):
    """Root configuration."""

    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None

    def resolve_api_key(self) -> str | None:
        if self.anthropic.api_key is None:
            return None
        return self.anthropic.api_key.get_secret_value()
