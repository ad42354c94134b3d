"""Directory entries: the root, mounts, and secrets."""

from __future__ import annotations

import stat
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from vaultctl.core.paths import ROOT, SEPARATOR
from vaultctl.vault.base import MountInfo

DIR_MODE = 0o755
FILE_MODE = 0o644


@dataclass(frozen=True)
class RootEntry:
    """The root of the namespace; synthetic, never fetched."""

    @property
    def name(self) -> str:
        return ROOT

    @property
    def is_dir(self) -> bool:
        return True

    @property
    def mode(self) -> int:
        return DIR_MODE


@dataclass(frozen=True)
class MountEntry:
    """A secrets engine mount, or an intermediate directory leading to one."""

    path: str
    mount: MountInfo

    @property
    def name(self) -> str:
        return self.path

    @property
    def is_dir(self) -> bool:
        return True

    @property
    def mode(self) -> int:
        return DIR_MODE


@dataclass(frozen=True)
class SecretEntry:
    """A leaf secret, or a listable prefix when key ends with a separator."""

    path: str
    key: str
    data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.path

    @property
    def is_dir(self) -> bool:
        return self.key.endswith(SEPARATOR)

    @property
    def mode(self) -> int:
        return DIR_MODE if self.is_dir else FILE_MODE


Entry: TypeAlias = RootEntry | MountEntry | SecretEntry


def entry_kind(entry: Entry) -> str:
    """Return "root", "mount", "dir" or "secret" for an entry."""
    match entry:
        case RootEntry():
            return "root"
        case MountEntry():
            return "mount"
        case SecretEntry() if entry.is_dir:
            return "dir"
        case SecretEntry():
            return "secret"
    raise TypeError(f"not a directory entry: {entry!r}")


def filemode(entry: Entry) -> str:
    """Return an ls -l style mode string, e.g. "drwxr-xr-x"."""
    kind = stat.S_IFDIR if entry.is_dir else stat.S_IFREG
    return stat.filemode(kind | entry.mode)
