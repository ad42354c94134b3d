"""The template command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from vaultctl.cli_commands.common import get_session, handle_errors
from vaultctl.cli_commands.secrets import GroupOption, ModeOption, OutputOption, OwnerOption
from vaultctl.core.template import TemplateRenderer
from vaultctl.output.writer import SafeOutputWriter, parse_mode


def template(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Template file")],
    mode: ModeOption = None,
    output: OutputOption = None,
    engine: Annotated[
        str | None,
        typer.Option("--engine", "-e", help="Escaping: text (none) or html"),
    ] = None,
    owner: OwnerOption = None,
    group: GroupOption = None,
) -> None:
    """
    Render a template containing Vault secrets.

    Templates use Jinja2 syntax with three extra functions:

        secret(path, key)       the string value of key
        nested(path, "a.b.c")   key "a" holds JSON; walk it to "b", then "c"
        decode(path)            a typed secret, through its codec

    All referenced secrets are fetched after the template has been
    evaluated. Nothing is written if any of them is missing.

    Example:
        The value for key foo at secret/test is: {{ secret("secret/test", "foo") }}
    """
    session = get_session(ctx)
    with handle_errors():
        file_mode = parse_mode(mode or session.config.template.mode)
        renderer = TemplateRenderer(
            session.client.store,
            codecs=session.codecs,
            engine=engine or session.config.template.engine,
        )
        content = renderer.render_file(file)

        with SafeOutputWriter(output, file_mode, owner=owner, group=group) as writer:
            if content:
                writer.write(content)
