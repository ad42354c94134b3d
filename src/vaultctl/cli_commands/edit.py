"""The edit command: change a secret as YAML in $EDITOR."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Annotated, Any

import click
import typer
import yaml

from vaultctl.cli_commands.common import get_session, handle_errors
from vaultctl.core.client import Client
from vaultctl.errors import LocalIOError
from vaultctl.output.rich import print_error, print_success, print_warning

EDITING_NEW = """\
# You are editing a new secret, data can be entered as
# structured YAML, see https://yaml.org/
#
# Lines starting with a hash (#) are ignored.
"""

EDITING_OLD = (
    EDITING_NEW
    + """\
#
# Removing all content will delete the secret from Vault.
"""
)


def edit(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Secret path")],
) -> None:
    """
    Edit a secret in an interactive editor ($EDITOR).

    The secret is presented as YAML. Saving an empty document deletes an
    existing secret.
    """
    with handle_errors():
        client = get_session(ctx).client
        name, exists = write_edit_file(client, path)
        try:
            data = run_editor(name)
        finally:
            os.unlink(name)

        if not data:
            if not exists:
                print_warning("no data was saved")
                return
            client.delete(path)
            print_success(f"secret at {path} removed")
            return

        client.write(path, data)
        print_success(f"secret at {path} saved")


def write_edit_file(client: Client, path: str) -> tuple[str, bool]:
    """Dump the secret at path into a temporary YAML file.

    Returns:
        The temporary file name and whether the secret exists
    """
    secret = client.read(path)
    exists = secret is not None
    if exists:
        content = EDITING_OLD + yaml.safe_dump(secret, default_flow_style=False)
    else:
        content = EDITING_NEW

    fd, name = tempfile.mkstemp(prefix="vc", suffix=".yaml")
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    return name, exists


def run_editor(name: str) -> dict[str, Any]:
    """Open name in the editor until it holds a valid YAML mapping."""
    editor = os.environ.get("EDITOR")
    if not editor:
        print_warning("no $EDITOR set, defaulting to vi")
        editor = "vi"

    while True:
        click.edit(filename=name, editor=editor)
        content = Path(name).read_text(encoding="utf-8")

        try:
            data = yaml.safe_load(content)
            if data is None:
                return {}
            if not isinstance(data, dict):
                raise yaml.YAMLError("expected a mapping of keys to values")
            return data
        except yaml.YAMLError as e:
            print_error(str(e))
            if not typer.confirm("edit again?", default=True):
                raise LocalIOError("aborted") from None
