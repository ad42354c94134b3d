"""The interactive shell.

The shell keeps one Session for its whole lifetime, so the working path set
with "cd" and the cached mount table carry over from one command to the
next. Every other line is handed to the same Typer application the batch
CLI runs.
"""

from __future__ import annotations

import cmd
import logging
import shlex
from pathlib import Path
from typing import Annotated

import click
import typer

from vaultctl.cli_commands.common import Session, get_session, handle_errors
from vaultctl.core.client import is_any, is_dir
from vaultctl.output.rich import console, print_error, print_plain

logger = logging.getLogger(__name__)

HUSH_LOGIN = Path("~/.hush_login")

BANNER = """
Welcome to vc, the Vault command line interactive shell. Tab completes
secret paths. Type "help" for an overview of available commands.
"""

SHELL_COMMANDS = """\
Available shell commands are:
    cd          set current directory
    help        get command usage
    pwd         get current directory
    quit        terminate the shell
"""

# Number of path arguments per command; -1 means any number
COMMANDS_WITH_PATH_ARGS = {"cat": -1, "cp": 2, "ls": -1, "mv": 2, "rm": 1, "edit": 1}
COMMANDS_WITH_DEFAULT_PATH = {"cat", "ls"}
OPTIONS_WITH_VALUES = {"-k", "--key", "-m", "--mode", "-o", "--output", "--owner", "--group"}


class VaultShell(cmd.Cmd):
    """Line-oriented shell over a Session."""

    def __init__(self, command: click.Command, session: Session, user: str = "?"):
        super().__init__()
        self.command = command
        self.session = session
        self.user = user
        self.prompt = self.make_prompt()

    @property
    def client(self):
        return self.session.client

    def make_prompt(self) -> str:
        return f"{self.user}@vault {self.client.path}> "

    def preloop(self) -> None:
        # Complete whole paths, not just the part after the last "/"
        if self.use_rawinput and self.completekey:
            try:
                import readline
            except ImportError:
                return
            readline.set_completer_delims(" \t\n")

    def postcmd(self, stop: bool, line: str) -> bool:
        self.prompt = self.make_prompt()
        return stop

    def emptyline(self) -> bool:
        return False

    def do_cd(self, arg: str) -> None:
        """Set the current directory."""
        arg = arg.strip()
        self.client.set_path(self.client.abspath(arg) if arg else "/")

    def do_pwd(self, arg: str) -> None:
        """Print the current directory."""
        print_plain(self.client.path)

    def do_quit(self, arg: str) -> bool:
        """Terminate the shell."""
        return True

    do_exit = do_quit
    do_bye = do_quit

    def do_EOF(self, arg: str) -> bool:
        console.print()
        return True

    def do_help(self, arg: str) -> None:
        """Show usage for a command, or the list of commands."""
        arg = arg.strip()
        if arg:
            self.dispatch(shlex.split(arg) + ["--help"])
            return
        self.dispatch(["--help"])
        print_plain(SHELL_COMMANDS)

    def default(self, line: str) -> None:
        try:
            args = shlex.split(line)
        except ValueError as e:
            print_error(str(e))
            return
        self.dispatch(self.expand_args(args))

    def expand_args(self, args: list[str]) -> list[str]:
        """Make the path arguments of a command absolute."""
        if not args or args[0] not in COMMANDS_WITH_PATH_ARGS:
            return args

        name, rest = args[0], args[1:]
        if not rest:
            if name in COMMANDS_WITH_DEFAULT_PATH:
                return [name, self.client.path]
            return args

        expanded = [name]
        takes_value = False
        for arg in rest:
            if takes_value:
                expanded.append(arg)
                takes_value = False
            elif arg.startswith("-"):
                expanded.append(arg)
                takes_value = arg in OPTIONS_WITH_VALUES
            else:
                expanded.append(self.client.abspath(arg))
        return expanded

    def dispatch(self, args: list[str]) -> int:
        """Run one command line through the CLI application."""
        logger.debug("command: %r", args)
        try:
            code = self.command.main(
                args=args, prog_name="vc", obj=self.session, standalone_mode=False
            )
        except click.ClickException as e:
            e.show()
            return e.exit_code
        except click.Abort:
            print_error("aborted")
            return 1
        if code:
            logger.debug("return code %d", code)
        return code or 0

    def completedefault(self, text: str, line: str, begidx: int, endidx: int) -> list[str]:
        return self.client.complete(text, is_any)

    def complete_cd(self, text: str, line: str, begidx: int, endidx: int) -> list[str]:
        return self.client.complete(text, is_dir)


def shell(
    ctx: typer.Context,
    path: Annotated[str | None, typer.Argument(help="Initial directory")] = None,
) -> None:
    """Start an interactive shell."""
    session = get_session(ctx)
    with handle_errors():
        client = session.client
        client.set_path(path or "/")
        token = client.store.lookup_token()
    logger.debug("client: token: %r", token)
    user = token.get("display_name") or "?"

    shell_loop = VaultShell(ctx.find_root().command, session, user)
    if not HUSH_LOGIN.expanduser().exists():
        shell_loop.intro = BANNER
    shell_loop.cmdloop()
