"""Chat command for interactive CLI sessions."""

import asyncio
import contextlib
import signal
from pathlib import Path
from typing import Annotated

import typer

from agentstream.cli.console import console, dim, error
from agentstream.config import AgentStreamConfig, ConfigError, load_config
from agentstream.core import (
    CancelToken,
    SessionCallbacks,
    SessionController,
    ToolUseStatus,
)
from agentstream.llm import Message, Role, create_backend
from agentstream.logging import configure_logging
from agentstream.tools import ToolRegistry, register_builtin_tools

EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit"}


def register(app: typer.Typer) -> None:
    """Register the chat command."""

    @app.command()
    def chat(
        prompt: Annotated[
            str | None,
            typer.Argument(help="Single prompt to run (non-interactive mode)"),
        ] = None,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
        model: Annotated[
            str | None,
            typer.Option("--model", "-m", help="Model to use (overrides config)"),
        ] = None,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Show debug logging"),
        ] = False,
        no_tools: Annotated[
            bool,
            typer.Option("--no-tools", help="Disable the built-in tools"),
        ] = False,
    ) -> None:
        """Start an interactive chat session, or run a single prompt.

        Press Ctrl-C while a response is streaming to cancel it.

        Examples:
            agentstream chat                       # Interactive mode
            agentstream chat "Hello, how are you?"  # Single prompt
        """
        try:
            config = load_config(config_path)
        except (FileNotFoundError, ConfigError) as e:
            error(str(e))
            raise typer.Exit(1) from None

        if model:
            config.session = config.session.model_copy(update={"model": model})

        configure_logging(
            level="DEBUG" if verbose else (config.log_level or "WARNING"),
            use_rich=True,
        )

        if config.resolve_api_key() is None:
            error("No API key configured. Set ANTHROPIC_API_KEY or anthropic.api_key")
            raise typer.Exit(1)

        try:
            asyncio.run(_run_chat(config, prompt, build_registry(not no_tools)))
        except KeyboardInterrupt:
            console.print("\n[dim]Goodbye![/dim]")


def build_registry(builtin_tools: bool = True) -> ToolRegistry:
    registry = ToolRegistry()
    if builtin_tools:
        register_builtin_tools(registry)
    return registry


def _print_token(text: str) -> None:
    console.print(text, end="", markup=False, highlight=False, soft_wrap=True)


def _print_tool_use(name: str, status: ToolUseStatus) -> None:
    if status == ToolUseStatus.CALLING:
        dim(f"\n[using {name}...]")


async def run_turn(
    controller: SessionController,
    history: list[Message],
) -> str | None:
    """Stream one assistant reply to the console.

    Returns the reply text, or None if it failed or was cancelled.
    """
    token = CancelToken()
    result: dict[str, str] = {}

    callbacks = SessionCallbacks(
        on_token=_print_token,
        on_complete=lambda text: result.setdefault("text", text),
        on_error=lambda e: error(f"\nError: {e}"),
        on_tool_use=_print_tool_use,
    )

    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    try:
        await controller.run(history, callbacks, token)
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)

    console.print()
    if token.cancelled:
        dim("[cancelled]")
    return result.get("text")


async def _run_chat(
    config: AgentStreamConfig, prompt: str | None, registry: ToolRegistry
) -> None:
    backend = create_backend(config)
    controller = SessionController(backend, registry, config.session)
    history: list[Message] = []

    if prompt:
        history.append(Message(role=Role.USER, content=prompt))
        await run_turn(controller, history)
        return

    dim("Type 'exit' to quit. Ctrl-C cancels a response in progress.")
    while True:
        try:
            user_input = await asyncio.to_thread(console.input, "[bold]You:[/bold] ")
        except EOFError:
            break
        user_input = user_input.strip()
        if not user_input:
            continue
        if user_input.lower() in EXIT_COMMANDS:
            break

        history.append(Message(role=Role.USER, content=user_input))
        reply = await run_turn(controller, history)
        if reply:
            history.append(Message(role=Role.ASSISTANT, content=reply))
        else:
            # Drop the unanswered prompt so turns keep alternating
            history.pop()

    console.print("[dim]Goodbye![/dim]")
