"""Write output files safely: temp file in place, then rename.

A SafeOutputWriter for a file path creates ".<name>.<random>" next to the
target on the first write, with the requested mode and ownership. Closing
renames it over the target; leaving the context with an exception removes
it. Nothing written means nothing created.
"""

from __future__ import annotations

import grp
import logging
import os
import pwd
import sys
import tempfile
from typing import BinaryIO

from vaultctl.errors import ArgumentError, LocalIOError

logger = logging.getLogger(__name__)

STDOUT_NAMES = frozenset({"", "-", "/dev/stdout"})
STDERR_NAMES = frozenset({"/dev/stderr"})


def parse_mode(mode: str) -> int:
    """Parse an octal permission string such as "0600"."""
    try:
        value = int(mode, 8)
    except ValueError:
        raise ArgumentError(f"invalid mode: {mode!r}") from None
    if not 0 <= value <= 0o7777:
        raise ArgumentError(f"invalid mode: {mode!r}")
    return value


def lookup_uid(owner: str | None) -> int:
    """Numeric uid for a user name or id; -1 leaves the owner unchanged."""
    if not owner:
        return -1
    if owner.isdigit():
        return int(owner)
    try:
        return pwd.getpwnam(owner).pw_uid
    except KeyError:
        raise ArgumentError(f"unknown user: {owner}") from None


def lookup_gid(group: str | None) -> int:
    """Numeric gid for a group name or id; -1 leaves the group unchanged."""
    if not group:
        return -1
    if group.isdigit():
        return int(group)
    try:
        return grp.getgrnam(group).gr_gid
    except KeyError:
        raise ArgumentError(f"unknown group: {group}") from None


class SafeOutputWriter:
    """Binary writer for a file path, stdout ("", "-") or stderr."""

    def __init__(
        self,
        name: str | os.PathLike[str] | None,
        mode: int = 0o600,
        owner: str | None = None,
        group: str | None = None,
    ):
        self.name = os.fspath(name) if name is not None else ""
        self.mode = mode
        self.uid = lookup_uid(owner)
        self.gid = lookup_gid(group)
        self.temp: str | None = None
        self._file: BinaryIO | None = None

    @property
    def is_stdio(self) -> bool:
        return self.name in STDOUT_NAMES or self.name in STDERR_NAMES

    def _stream(self) -> BinaryIO:
        stream = sys.stderr if self.name in STDERR_NAMES else sys.stdout
        stream.flush()
        return stream.buffer

    def _open(self) -> BinaryIO:
        directory, base = os.path.split(self.name)
        fd, self.temp = tempfile.mkstemp(prefix=f".{base}.", dir=directory or ".")
        logger.debug("writing to %s", self.temp)
        try:
            os.fchmod(fd, self.mode)
            if self.uid != -1 or self.gid != -1:
                os.fchown(fd, self.uid, self.gid)
        except OSError:
            os.close(fd)
            os.unlink(self.temp)
            self.temp = None
            raise
        return os.fdopen(fd, "wb")

    def write(self, data: bytes | str) -> int:
        """Write data, creating the temp file on first use."""
        if isinstance(data, str):
            data = data.encode("utf-8", errors="surrogateescape")
        try:
            if self.is_stdio:
                stream = self._stream()
                written = stream.write(data)
                stream.flush()
                return written
            if self._file is None:
                self._file = self._open()
            return self._file.write(data)
        except OSError as e:
            raise LocalIOError(f"{self.name or 'stdout'}: {e.strerror or e}") from e

    def close(self) -> None:
        """Close the temp file and rename it over the target."""
        if self._file is None:
            return
        try:
            self._file.close()
            os.replace(self.temp, self.name)
        except OSError as e:
            self.discard()
            raise LocalIOError(f"{self.name}: {e.strerror or e}") from e
        finally:
            self._file = None
        self.temp = None

    def discard(self) -> None:
        """Close and remove the temp file without touching the target."""
        if self._file is not None:
            self._file.close()
            self._file = None
        if self.temp is not None:
            try:
                os.unlink(self.temp)
            except FileNotFoundError:
                pass
            self.temp = None

    def __enter__(self) -> SafeOutputWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.discard()
