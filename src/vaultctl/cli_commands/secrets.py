"""Commands that read and rearrange secrets: cat, cp, mv, rm."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any

import typer

from vaultctl.cli_commands.common import (
    confirm_overwrite,
    get_session,
    handle_errors,
    is_interactive,
)
from vaultctl.codec import CODEC_TYPE_KEY, CodecRegistry
from vaultctl.core.client import Client
from vaultctl.errors import (
    KeyNotFoundError,
    LocalIOError,
    SecretNotFoundError,
)
from vaultctl.output.writer import SafeOutputWriter, parse_mode

logger = logging.getLogger(__name__)

ModeOption = Annotated[
    str | None,
    typer.Option("--mode", "-m", help="Output file mode (default 0600)"),
]
OutputOption = Annotated[
    str | None,
    typer.Option("--output", "-o", help="Output file (default: stdout)"),
]
OwnerOption = Annotated[
    str | None, typer.Option("--owner", help="Output file owner (name or uid)")
]
GroupOption = Annotated[
    str | None, typer.Option("--group", help="Output file group (name or gid)")
]
ForceOption = Annotated[bool, typer.Option("--force", "-f", help="Force overwrite")]


def cat(
    ctx: typer.Context,
    paths: Annotated[list[str], typer.Argument(help="Secret paths or patterns")],
    key: Annotated[
        str | None, typer.Option("--key", "-k", help="Print only this key")
    ] = None,
    mode: ModeOption = None,
    output: OutputOption = None,
    ignore_missing: Annotated[
        bool, typer.Option("--ignore-missing", "-i", help="Ignore missing key")
    ] = False,
    owner: OwnerOption = None,
    group: GroupOption = None,
) -> None:
    """
    Concatenate and print secrets.

    Without --key, a typed secret (one with a __TYPE__ key) is printed through
    its codec and any other secret as JSON. With --key, the string value of
    that key is printed as-is.

    Examples:
        vc cat secret/app/db
        vc cat -k password secret/app/db
        vc cat -o /etc/ssl/private/app.pem -m 0400 secret/app/tls
    """
    session = get_session(ctx)
    with handle_errors():
        file_mode = parse_mode(mode or session.config.output.mode)
        client = session.client

        names = []
        for pattern in paths:
            names.extend(entry.name for entry in client.glob(pattern))

        buf = bytearray()
        for name in names:
            logger.debug("cat: read %r", name)
            secret = client.read(name)
            if secret is None:
                raise SecretNotFoundError(f"{name}: secret not found")
            buf += render_secret(name, secret, key, ignore_missing, session.codecs)

        with SafeOutputWriter(output, file_mode, owner=owner, group=group) as writer:
            if buf:
                writer.write(bytes(buf))


def render_secret(
    path: str,
    secret: dict[str, Any],
    key: str | None,
    ignore_missing: bool,
    codecs: CodecRegistry,
) -> bytes:
    """Return the bytes cat prints for one secret."""
    if key is None and CODEC_TYPE_KEY not in secret:
        return (json.dumps(secret, indent=2) + "\n").encode("utf-8")

    if key is None or key == CODEC_TYPE_KEY:
        data = dict(secret)
        kind = data.pop(CODEC_TYPE_KEY, None)
        if not isinstance(kind, str):
            if ignore_missing:
                return b""
            raise KeyNotFoundError(
                f"{path}: key {CODEC_TYPE_KEY} not found; maybe supply a key with -k?"
            )
        return codecs.codec_for(kind).marshal(path, data)

    if key not in secret:
        if ignore_missing:
            return b""
        raise KeyNotFoundError(f"{path}: key {key!r} not found")

    value = secret[key]
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, bytes):
        return value
    raise KeyNotFoundError(f"{path}: key {key!r}: can't cat type {type(value).__name__}")


def copy_secret(client: Client, source: str, target: str, force: bool) -> bool:
    """Copy the secret at source to target; returns whether it was written."""
    secret = client.read(source)
    if secret is None:
        raise SecretNotFoundError(f"no secret at {source!r}")

    if not force and client.read(target) is not None:
        if not is_interactive():
            raise LocalIOError(f"secret at {target!r} already exists")
        if not confirm_overwrite(f"secret at {target}"):
            return False

    client.write(target, secret)
    return True


def cp(
    ctx: typer.Context,
    source: Annotated[str, typer.Argument(help="Source secret")],
    target: Annotated[str, typer.Argument(help="Target secret")],
    force: ForceOption = False,
) -> None:
    """Copy a secret (clone)."""
    with handle_errors():
        client = get_session(ctx).client
        if client.abspath(source) == client.abspath(target):
            return
        copy_secret(client, source, target, force)


def mv(
    ctx: typer.Context,
    source: Annotated[str, typer.Argument(help="Source secret")],
    target: Annotated[str, typer.Argument(help="Target secret")],
    force: ForceOption = False,
) -> None:
    """Move a secret (rename)."""
    with handle_errors():
        client = get_session(ctx).client
        if client.abspath(source) == client.abspath(target):
            return
        if copy_secret(client, source, target, force):
            client.delete(source)


def rm(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Secret path")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Force removal")] = False,
) -> None:
    """Remove a secret."""
    with handle_errors():
        client = get_session(ctx).client
        if not force and client.read(path) is None:
            raise SecretNotFoundError(f"secret at {path!r} does not exist")
        client.delete(path)
