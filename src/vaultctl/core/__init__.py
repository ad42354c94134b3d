"""Virtual filesystem and template engine over the Vault secret namespace."""

from vaultctl.core.client import Client
from vaultctl.core.entries import Entry, MountEntry, RootEntry, SecretEntry, entry_kind
from vaultctl.core.paths import clean, resolve
from vaultctl.core.template import TemplateRenderer

__all__ = [
    "Client",
    "Entry",
    "MountEntry",
    "RootEntry",
    "SecretEntry",
    "TemplateRenderer",
    "clean",
    "entry_kind",
    "resolve",
]
