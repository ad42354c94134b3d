"""The file commands: store and retrieve whole files."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

from vaultctl.cli_commands.common import (
    confirm_overwrite,
    get_session,
    handle_errors,
    is_interactive,
)
from vaultctl.cli_commands.secrets import ForceOption, GroupOption, ModeOption, OwnerOption
from vaultctl.codec import CODEC_TYPE_KEY
from vaultctl.codec.file_codec import FILE_CONTENTS_KEY, FILE_TYPE, decode_contents
from vaultctl.errors import KeyNotFoundError, LocalIOError, SecretNotFoundError
from vaultctl.output.writer import STDOUT_NAMES, SafeOutputWriter, parse_mode

file_app = typer.Typer(
    name="file",
    help="Store and retrieve files.",
    no_args_is_help=True,
)


@file_app.command("get")
def file_get(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Secret path")],
    filepath: Annotated[
        str, typer.Argument(help="Destination file (default: stdout)")
    ] = "-",
    force: ForceOption = False,
    ignore_missing: Annotated[
        bool, typer.Option("--ignore-missing", "-i", help="Ignore a missing secret")
    ] = False,
    mode: ModeOption = None,
    owner: OwnerOption = None,
    group: GroupOption = None,
) -> None:
    """
    Retrieve a file stored with "file put".

    If filepath exists, you are asked before it is overwritten on a terminal;
    otherwise it is an error unless --force is given.
    """
    session = get_session(ctx)
    with handle_errors():
        if not force and filepath not in STDOUT_NAMES and Path(filepath).exists():
            if not is_interactive():
                raise LocalIOError(f"{filepath}: already exists")
            if not confirm_overwrite(filepath):
                return

        file_mode = parse_mode(mode or session.config.output.mode)

        secret = session.client.read(path)
        if secret is None:
            if ignore_missing:
                return
            raise SecretNotFoundError(f"no secret at {path!r}")

        kind = secret.get(CODEC_TYPE_KEY)
        if not isinstance(kind, str):
            raise KeyNotFoundError(f"secret at {path!r} has no type marker")
        if kind != FILE_TYPE:
            raise KeyNotFoundError(f"secret at {path!r} is not a file")

        contents = secret.get(FILE_CONTENTS_KEY)
        if not isinstance(contents, str):
            raise KeyNotFoundError(f"secret at {path!r} has no content")

        data = decode_contents(contents)
        with SafeOutputWriter(filepath, file_mode, owner=owner, group=group) as writer:
            writer.write(data)


@file_app.command("put")
def file_put(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Secret path")],
    filepath: Annotated[str, typer.Argument(help="Source file (default: stdin)")] = "-",
    force: ForceOption = False,
) -> None:
    """
    Store a file as a secret.

    The contents are stored base64 encoded under "contents", with the type
    marker __TYPE__ set to "file". An existing secret is only replaced after
    confirmation on a terminal, or with --force.
    """
    session = get_session(ctx)
    with handle_errors():
        if filepath in STDOUT_NAMES:
            raw = sys.stdin.buffer.read()
        else:
            raw = Path(filepath).read_bytes()

        client = session.client
        if not force and client.read(path) is not None:
            if not is_interactive() or filepath in STDOUT_NAMES:
                raise LocalIOError(f"secret at {path!r} already exists")
            if not confirm_overwrite(f"secret at {path}"):
                return

        client.write(path, session.codecs.codec_for(FILE_TYPE).unmarshal(raw))
