"""Filesystem view of Vault: stat, readdir and glob over mounts and secrets.

Vault itself is flat: a path either holds a secret (read), lists child keys
(list), or is (part of) a mount point. The Client combines those three
answers into directory entries so commands can treat the namespace like a
file tree. It also carries the working path of a session, which the
interactive shell changes with "cd".
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable, Iterable
from typing import Any

from vaultctl.config import DEFAULT_MOUNT_TYPES
from vaultctl.core.entries import Entry, MountEntry, RootEntry, SecretEntry
from vaultctl.core.glob import WILDCARDS, compile_glob, has_magic
from vaultctl.core.mounts import MOUNT_REFRESH, MountCache
from vaultctl.core.paths import (
    ROOT,
    SEPARATOR,
    api_path,
    basename,
    clean,
    is_abs,
    parent,
    resolve,
    split,
)
from vaultctl.errors import EntryNotFoundError, GlobError, VaultError
from vaultctl.vault.base import MountInfo, SecretStore, is_permission_denied

logger = logging.getLogger(__name__)

EntryFilter = Callable[[Entry], bool]


def is_any(entry: Entry) -> bool:
    return True


def is_dir(entry: Entry) -> bool:
    return entry.is_dir


class Client:
    """A session over a secret store with a working path."""

    def __init__(
        self,
        store: SecretStore,
        path: str = ROOT,
        mount_types: Iterable[str] = DEFAULT_MOUNT_TYPES,
        mount_ttl: float = MOUNT_REFRESH,
    ):
        self.store = store
        self.path = ROOT
        self.mount_types = frozenset(mount_types)
        self._mounts = MountCache(store.list_mounts, ttl=mount_ttl)
        self.set_path(path)

    def set_path(self, path: str) -> None:
        """Update the working path."""
        if not path.startswith(SEPARATOR):
            path = SEPARATOR + path
        self.path = clean(path)

    def abspath(self, path: str) -> str:
        """Resolve path against the working path."""
        return resolve(self.path, path)

    def mounts(self, tolerate_denied: bool = False) -> dict[str, MountInfo]:
        """Return the mount table.

        With tolerate_denied, a token that may not list mounts gets whatever
        was cached before instead of an error.
        """
        try:
            return self._mounts.mounts()
        except VaultError as e:
            if tolerate_denied and is_permission_denied(e):
                logger.debug("mounts: permission denied, using cached table")
                return self._mounts.snapshot()
            raise

    # Secret access relative to the working path

    def read(self, path: str) -> dict[str, Any] | None:
        """Read the secret at path."""
        return self.store.read_secret(api_path(self.abspath(path)))

    def write(self, path: str, data: dict[str, Any]) -> None:
        """Write data to the secret at path."""
        self.store.write_secret(api_path(self.abspath(path)), data)

    def delete(self, path: str) -> None:
        """Delete the secret at path."""
        self.store.delete_secret(api_path(self.abspath(path)))

    # Filesystem view

    def stat(self, path: str) -> Entry:
        """Describe what exists at path.

        Raises:
            EntryNotFoundError: If path is neither secret, prefix nor mount
            VaultError: For any other failure talking to Vault
        """
        path = self.abspath(path)
        logger.debug("stat: %r", path)

        if path == ROOT:
            return RootEntry()

        # Prefixes answer a read with permission denied; that is not fatal
        try:
            secret = self.store.read_secret(api_path(path))
        except VaultError as e:
            if not is_permission_denied(e):
                raise
            secret = None
        if secret is not None:
            return SecretEntry(path=path, key=split(path)[1], data=secret)

        # Every folder directly below the root is a mount, skip the list call
        if parent(path) != ROOT:
            logger.debug("stat: list %r", api_path(path))
            keys = self.store.list_secrets(api_path(path))
            if keys is not None:
                prefix = path.rstrip(SEPARATOR) + SEPARATOR
                return SecretEntry(path=prefix, key=prefix, data={"keys": keys})

        for name, mount in self.mounts(tolerate_denied=True).items():
            name = SEPARATOR + name.rstrip(SEPARATOR)
            logger.debug("stat: mount %r =~ %r?", name, path)
            if name == path:
                return MountEntry(path=name, mount=mount)
            if name.startswith(path + SEPARATOR):
                return MountEntry(path=path + SEPARATOR, mount=mount)

        raise EntryNotFoundError(f"{path}: not found")

    def read_dir(self, path: str) -> list[Entry]:
        """List the entries directly below path, in no particular order."""
        path = self.abspath(path)
        logger.debug("readdir: %r", path)
        entries: list[Entry] = []
        seen: set[str] = set()

        for name, mount in self.mounts(tolerate_denied=True).items():
            if mount.type not in self.mount_types:
                continue
            # Walk up from the mount until we reach path; the element just
            # below path is the child we show
            base = SEPARATOR + name.strip(SEPARATOR)
            directory = parent(base)
            while len(directory) >= len(path):
                if directory == path:
                    # Sibling mounts can share the child segment
                    if base not in seen:
                        seen.add(base)
                        entries.append(MountEntry(path=base, mount=mount))
                    break
                base = directory
                directory = parent(directory)

        keys = self.store.list_secrets(api_path(path))
        if keys:
            listing = {"keys": keys}
            prefix = path.rstrip(SEPARATOR)
            for key in keys:
                entries.append(
                    SecretEntry(path=clean(f"{prefix}/{key}"), key=key, data=listing)
                )

        return entries

    def glob(self, pattern: str) -> list[Entry]:
        """Expand a pattern with "*" and "?" wildcards in its last element.

        Raises:
            GlobError: If the directory part of the pattern has wildcards
        """
        logger.debug("glob: %r", pattern)

        if not has_magic(pattern):
            return [self.stat(pattern)]

        directory, base = split(self.abspath(pattern))
        if any(char in directory for char in WILDCARDS):
            raise GlobError("directory globbing not supported")
        if directory != ROOT:
            directory = directory.rstrip(SEPARATOR)

        matcher = compile_glob(directory, base)
        matches = []
        for entry in self.read_dir(directory):
            logger.debug("filter: %r =~ %s", entry.name, matcher.pattern)
            if matcher.match(entry.name):
                matches.append(entry)
        return matches

    def complete(self, text: str, *filters: EntryFilter) -> list[str]:
        """Suggest completions for a partially typed path."""
        full = self.abspath(text)
        if (not text or text.endswith(SEPARATOR)) and full != ROOT:
            full += "/*"
        else:
            full += "*"
        logger.debug("complete %r -> %r in %r", text, full, self.path)

        try:
            entries = self.glob(full)
        except VaultError as e:
            logger.debug("complete: %s", e)
            return []

        suggestions = []
        for entry in entries:
            if not all(f(entry) for f in filters):
                continue
            name = entry.name.rstrip(SEPARATOR) or ROOT
            if not is_abs(text):
                name = self._relative(name, text)
            suggestions.append(name + SEPARATOR if entry.is_dir else name)
            logger.debug("candidate %r", suggestions[-1])
        return suggestions

    def _relative(self, name: str, text: str) -> str:
        if text.startswith(".."):
            rel = posixpath.relpath(name, self.path)
            if rel == ".":
                return "../" + basename(self.path)
            return rel
        if self.path == ROOT:
            return name.lstrip(SEPARATOR)
        return name.removeprefix(self.path + SEPARATOR)
