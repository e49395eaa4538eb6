"""CLI command modules."""

from agentstream.cli.commands import chat, config

__all__ = ["chat", "config"]
