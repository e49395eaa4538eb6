"""Command-line interface."""

from agentstream.cli.app import app, main

__all__ = ["app", "main"]
