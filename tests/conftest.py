"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from vaultctl.cli_commands.common import Session
from vaultctl.config import VaultctlConfig
from vaultctl.core.client import Client
from vaultctl.errors import PermissionDeniedError
from vaultctl.vault.base import MountInfo, SecretStore


class MemoryStore(SecretStore):
    """Secret store kept in a dict, counting every remote call."""

    def __init__(
        self,
        secrets: dict[str, dict[str, Any]] | None = None,
        mounts: dict[str, str] | None = None,
    ):
        self.secrets = {path: dict(data) for path, data in (secrets or {}).items()}
        self.mount_table = {
            name: MountInfo(type=kind)
            for name, kind in (mounts if mounts is not None else {"secret/": "kv"}).items()
        }
        self.denied: set[str] = set()
        self.mounts_denied = False
        self.reads: list[str] = []
        self.lists: list[str] = []
        self.mount_calls = 0

    @property
    def calls(self) -> int:
        return len(self.reads) + len(self.lists) + self.mount_calls

    def read_secret(self, path: str) -> dict[str, Any] | None:
        self.reads.append(path)
        if path in self.denied:
            raise PermissionDeniedError(f"{path}: * permission denied")
        data = self.secrets.get(path)
        return dict(data) if data is not None else None

    def list_secrets(self, path: str) -> list[str] | None:
        self.lists.append(path)
        if not path:
            return None
        prefix = path.rstrip("/") + "/"
        keys = set()
        for name in self.secrets:
            if not name.startswith(prefix):
                continue
            child, sep, _ = name[len(prefix) :].partition("/")
            keys.add(child + sep)
        return sorted(keys) or None

    def write_secret(self, path: str, data: dict[str, Any]) -> None:
        self.secrets[path] = dict(data)

    def delete_secret(self, path: str) -> None:
        self.secrets.pop(path, None)

    def list_mounts(self) -> dict[str, MountInfo]:
        self.mount_calls += 1
        if self.mounts_denied:
            raise PermissionDeniedError("sys/mounts: * permission denied")
        return dict(self.mount_table)

    def is_authenticated(self) -> bool:
        return True

    def authenticate(self) -> None:
        pass

    def lookup_token(self) -> dict[str, Any]:
        return {"display_name": "token-tester"}


@pytest.fixture
def make_store():
    """Factory for stores with custom contents."""
    return MemoryStore


@pytest.fixture
def store():
    """A store with a kv mount at secret/ and a few secrets."""
    return MemoryStore(
        secrets={
            "secret/foo/bar": {"secret": "bar"},
            "secret/app/db": {"username": "app", "password": "s3cret"},
            "secret/app/api": {"token": "abc123"},
            "secret/app/settings": {
                "__TYPE__": "json",
                "debug": False,
                "workers": 4,
            },
        },
        mounts={"secret/": "kv", "sys/": "system", "team/kv/": "generic"},
    )


@pytest.fixture
def client(store):
    """A client over the in-memory store, working at the root."""
    return Client(store)


@pytest.fixture
def session(store):
    """A command session bound to the in-memory store."""
    return Session(config=VaultctlConfig(), store=store)


@pytest.fixture(autouse=True)
def isolate_vault_env(monkeypatch):
    """Keep the developer's Vault environment out of tests."""
    for name in (
        "VAULT_ADDR",
        "VAULT_TOKEN",
        "VAULT_TOKEN_FILE",
        "VAULT_CACERT",
        "VAULT_CAPATH",
        "VAULT_SKIP_VERIFY",
        "VAULT_NAMESPACE",
    ):
        monkeypatch.delenv(name, raising=False)
