"""The ls command."""

from __future__ import annotations

from typing import Annotated

import typer

from vaultctl.cli_commands.common import get_session, handle_errors
from vaultctl.core.client import Client
from vaultctl.core.entries import filemode
from vaultctl.errors import ExitCode, VaultError
from vaultctl.output.rich import print_error, print_plain


def ls(
    ctx: typer.Context,
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Secret paths or patterns (default: current path)"),
    ] = None,
    compact: Annotated[
        bool, typer.Option("-1", "--compact", help="One name per line, overrides -l")
    ] = False,
    long: Annotated[bool, typer.Option("-l", "--long", help="List in long format")] = False,
    recurse: Annotated[
        bool,
        typer.Option("-R", "--recursive", help="Recursively list subdirectories encountered"),
    ] = False,
) -> None:
    """
    List secrets.

    Paths may end in a "*" or "?" wildcard. A path that is a directory (a
    mount or a prefix holding other secrets) lists its contents.

    Examples:
        vc ls secret/
        vc ls -l 'secret/app/db*'
        vc ls -R secret/app
    """
    # Output is already one name per line; -1 only overrides -l
    if compact:
        long = False

    with handle_errors():
        client = get_session(ctx).client

    code = ExitCode.SUCCESS
    for path in paths or ["."]:
        code = max(code, list_path(client, path, long=long, recurse=recurse))

    if code:
        raise typer.Exit(code=int(code))


def list_path(client: Client, path: str, long: bool = False, recurse: bool = False) -> ExitCode:
    """Print the entries at path; returns the exit code."""
    try:
        entries = client.glob(path)
        if len(entries) == 1 and entries[0].is_dir:
            # Single directory found; list its contents
            entries = client.read_dir(entries[0].name)
    except VaultError as e:
        print_error(str(e))
        return e.exit_code

    if not entries:
        print_error(f"{path}: not found")
        return ExitCode.SYNTAX

    if recurse:
        print_plain(f"{path}:")

    by_name = {entry.name: entry for entry in entries}
    names = sorted(by_name)
    for name in names:
        if long:
            print_plain(f"{filemode(by_name[name])} {name}")
        else:
            print_plain(name)

    if recurse:
        for name in names:
            if not by_name[name].is_dir:
                continue
            print_plain("")
            code = list_path(client, name, long=long, recurse=recurse)
            if code:
                return code

    return ExitCode.SUCCESS
