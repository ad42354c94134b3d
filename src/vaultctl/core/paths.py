"""Lexical path handling for the secret namespace."""

from __future__ import annotations

import posixpath

SEPARATOR = "/"
ROOT = "/"


def clean(path: str) -> str:
    """Return the shortest lexically equivalent path.

    Repeated separators collapse, "." elements are dropped, ".." elements
    consume their parent (never climbing above the root) and trailing
    separators are removed except for the root itself. An empty path cleans
    to ".".
    """
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    # normpath keeps a leading "//" as POSIX allows it to be special
    if cleaned.startswith("//"):
        cleaned = ROOT + cleaned.lstrip(SEPARATOR)
    return cleaned


def is_abs(path: str) -> bool:
    """Check if path is rooted."""
    return path.startswith(SEPARATOR)


def resolve(base: str, path: str) -> str:
    """Resolve path against base; the result is always absolute and clean."""
    if is_abs(path):
        return clean(path)
    return clean(posixpath.join(ROOT, base, path))


def split(path: str) -> tuple[str, str]:
    """Split path after its final separator, into (dir, base)."""
    index = path.rfind(SEPARATOR) + 1
    return path[:index], path[index:]


def parent(path: str) -> str:
    """Return all but the last element of path, cleaned."""
    directory, _ = split(path)
    if not directory:
        return "."
    return clean(directory)


def basename(path: str) -> str:
    """Return the last element of path, ignoring trailing separators."""
    path = path.rstrip(SEPARATOR)
    if not path:
        return ROOT
    return split(path)[1]


def api_path(path: str) -> str:
    """Strip leading separators; Vault API paths are relative to /v1/."""
    return path.lstrip(SEPARATOR)
