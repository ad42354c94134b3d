"""Shell-style wildcards for base names."""

from __future__ import annotations

import re

from vaultctl.core.paths import ROOT

WILDCARDS = "*?"


def has_magic(pattern: str) -> bool:
    """Check if pattern contains a wildcard."""
    return any(char in pattern for char in WILDCARDS)


def glob_expression(base: str) -> str:
    """Translate a base-name wildcard into a regular expression fragment."""
    parts = []
    for char in base:
        if char == "?":
            parts.append(".")
        elif char == "*":
            parts.append(".*")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


def compile_glob(directory: str, base: str) -> re.Pattern[str]:
    """Compile a matcher for entry names under directory.

    Root-level patterns only anchor the start of the name, patterns below
    the root anchor both ends.
    """
    if directory == ROOT:
        return re.compile("^/" + glob_expression(base))
    return re.compile(f"^{re.escape(directory)}/{glob_expression(base)}$")
