"""Config commands."""

from pathlib import Path
from typing import Annotated

import typer

from agentstream.cli.console import console, error
from agentstream.config import ConfigError, get_config_path, load_config


def register(app: typer.Typer) -> None:
    """Register the config command group."""
    config_app = typer.Typer(help="Inspect configuration", no_args_is_help=True)

    @config_app.command("show")
    def show(
        config_path: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
    ) -> None:
        """Print the effective configuration with secrets masked."""
        try:
            config = load_config(config_path)
        except (FileNotFoundError, ConfigError) as e:
            error(str(e))
            raise typer.Exit(1) from None

        console.print_json(data=config.model_dump(mode="json"))

    @config_app.command("path")
    def path() -> None:
        """Print the default configuration file location."""
        console.print(str(get_config_path()))

    app.add_typer(config_app, name="config")
