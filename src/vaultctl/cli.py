"""Command-line interface for vaultctl."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Annotated

import typer

from vaultctl.cli_commands.common import Session
from vaultctl.cli_commands.edit import edit
from vaultctl.cli_commands.file import file_app
from vaultctl.cli_commands.listing import ls
from vaultctl.cli_commands.secrets import cat, cp, mv, rm
from vaultctl.cli_commands.shell import shell
from vaultctl.cli_commands.template import template
from vaultctl.config import ConfigNotFoundError, load_config
from vaultctl.errors import ExitCode
from vaultctl.output.rich import console, print_error, setup_logging


app = typer.Typer(
    name="vc",
    help="Work with Vault secrets like files: list, read, copy, edit and template them.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    debug: Annotated[
        bool, typer.Option("--debug", "-d", help="Enable debug output on stderr")
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to vaultctl.toml"),
    ] = None,
) -> None:
    """Vault command line client."""
    if ctx.obj is not None:
        # Invoked from the interactive shell, the session already exists
        return

    setup_logging(debug)
    try:
        ctx.obj = Session(config=load_config(config))
    except ConfigNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=int(ExitCode.SYNTAX)) from None
    except tomllib.TOMLDecodeError as e:
        print_error(f"{config or 'config'}: {e}")
        raise typer.Exit(code=int(ExitCode.SYNTAX)) from None


app.command()(ls)
app.command()(cat)
app.command()(cp)
app.command()(mv)
app.command()(rm)
app.command()(edit)
app.command()(template)
app.command()(shell)
app.add_typer(file_app, name="file")


@app.command()
def version() -> None:
    """Show vaultctl version."""
    from vaultctl import __version__

    console.print(f"vaultctl [bold green]{__version__}[/bold green]")


if __name__ == "__main__":
    app()
