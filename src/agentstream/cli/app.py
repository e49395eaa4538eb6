"""Main CLI application."""

import typer

from agentstream.cli.commands import chat, config

app = typer.Typer(
    name="agentstream",
    help="agentstream - streaming LLM sessions with tool use",
    no_args_is_help=True,
)

chat.register(app)
config.register(app)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
