"""Centralized logging configuration for agentstream.

Library code only creates module loggers; applications (the CLI included)
call configure_logging() once at startup.

Logging Levels:
- DEBUG: Round lifecycle, stream open/close, tool inputs and outputs
- INFO: Tool execution summaries, session completion, retries
- WARNING: Round/continuation limits, retry exhaustion
- ERROR: Tool failures, session failures
"""

import logging
import os
import re

ENV_VAR = "AGENTSTREAM_LOG_LEVEL"

DEFAULT_REDACT_PATTERNS: list[str] = [
    # Anthropic / OpenAI style keys
    r"\b(sk-[A-Za-z0-9_-]{20,})\b",
    # ENV-style assignments: API_KEY=secret or API_KEY: secret
    r"\b[A-Z0-9_]+(?:KEY|TOKEN|SECRET|PASSWORD)\s*[=:]\s*([^\s\"']{8,})",
    # Bearer tokens in headers
    r"\bBearer\s+([A-Za-z0-9._\-+=]{20,})\b",
    # x-api-key header values
    r"x-api-key['\"]?\s*[:=]\s*['\"]?([A-Za-z0-9._-]{12,})",
]

# Pinned to WARNING; they log every HTTP request at INFO
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "anthropic",
]


REDACTED_SHORT = "***"


def mask_secret(secret: str) -> str:
    """Keep the first and last four characters of long secrets."""
    if len(secret) < 12:
        return REDACTED_SHORT
    return f"{secret[:4]}...{secret[-4:]}"


class SecretRedactor:
    """Masks API keys and tokens in log output.

    Each pattern captures the secret in group 1; the surrounding match
    (header name, variable name) is kept as is.
    """

    def __init__(self, patterns: list[str] | None = None, enabled: bool = True):
        self.enabled = enabled
        self._patterns = [
            re.compile(p, re.IGNORECASE)
            for p in (patterns or DEFAULT_REDACT_PATTERNS)
        ]

    def redact(self, text: str) -> str:
        if not (self.enabled and text):
            return text
        for pattern in self._patterns:
            text = pattern.sub(_replace_secret, text)
        return text


def _replace_secret(match: re.Match[str]) -> str:
    secret = match.group(1)
    # Already masked by an earlier pattern
    if "..." in secret:
        return match.group(0)
    return match.group(0).replace(secret, mask_secret(secret))


class RedactingFilter(logging.Filter):
    """Rewrites each record's message with secrets masked."""

    def __init__(self, redactor: SecretRedactor | None = None):
        super().__init__()
        self._redactor = redactor or SecretRedactor()

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self._redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    - agentstream.core.controller -> core
    - agentstream.tools.dispatcher -> tools
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "agentstream":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


def resolve_level(level: str | None = None) -> str:
    """Pick a log level from the argument, then the environment, then INFO."""
    if level is None:
        level = os.environ.get(ENV_VAR, "INFO")
    level = level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        return "INFO"
    return level


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    redactor: SecretRedactor | None = None,
) -> None:
    """Configure logging for agentstream.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses AGENTSTREAM_LOG_LEVEL or INFO.
        use_rich: Use Rich handler for colorful console output.
        redactor: Secret redactor to apply; a default one if None.
    """
    log_level = getattr(logging, resolve_level(level))

    handler: logging.Handler
    if use_rich:
        from rich.logging import RichHandler

        handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            ComponentFormatter(
                "%(asctime)s | %(levelname)-8s | %(component)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    handler.addFilter(RedactingFilter(redactor))

    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
