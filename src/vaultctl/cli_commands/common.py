"""Session state and error handling shared by the commands."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import typer

from vaultctl.codec import CodecRegistry, default_registry
from vaultctl.config import VaultctlConfig
from vaultctl.core.client import Client
from vaultctl.errors import ExitCode, VaultError
from vaultctl.output.rich import print_error
from vaultctl.vault import SecretStore, get_secret_store


@dataclass
class Session:
    """State of one command invocation, or of a whole interactive shell.

    The store and client are created on first use so that commands which
    fail on their arguments never need a token.
    """

    config: VaultctlConfig = field(default_factory=VaultctlConfig)
    store: SecretStore | None = None
    codecs: CodecRegistry = field(default_factory=default_registry)
    _client: Client | None = field(default=None, repr=False)

    @property
    def client(self) -> Client:
        if self._client is None:
            if self.store is None:
                self.store = get_secret_store(config=self.config.vault)
            self.store.ensure_authenticated()
            self._client = Client(
                self.store,
                mount_types=self.config.vault.mount_types,
                mount_ttl=self.config.vault.mount_cache_ttl,
            )
        return self._client


def get_session(ctx: typer.Context) -> Session:
    """Return the session attached to the command context."""
    root = ctx.find_root()
    if root.obj is None:
        root.obj = Session()
    return root.obj


def fail(message: str, code: ExitCode = ExitCode.SYNTAX) -> typer.Exit:
    """Print message as an error and return the Exit to raise."""
    print_error(message)
    return typer.Exit(code=int(code))


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn vaultctl and local I/O errors into an error message and exit code."""
    try:
        yield
    except VaultError as e:
        raise fail(str(e), e.exit_code) from None
    except OSError as e:
        name = f"{e.filename}: " if e.filename else ""
        raise fail(f"{name}{e.strerror or e}", ExitCode.SYSTEM) from None


def is_interactive() -> bool:
    """Check if stdout is a terminal we can prompt on."""
    return sys.stdout.isatty()


def confirm_overwrite(what: str) -> bool:
    """Ask before replacing what; only possible on a terminal."""
    return typer.confirm(f"{what} already exists, overwrite?", default=False)
