"""Abstract base class for secret stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from vaultctl.errors import PermissionDeniedError

# Message fragment Vault puts in errors for denied requests
PERMISSION_DENIED_FRAGMENT = "* permission denied"


def is_permission_denied(exc: BaseException) -> bool:
    """Check whether an error means the caller may not touch the path.

    Typed errors from the HashiCorp store are recognised directly; other
    transports are matched on the message Vault sends back.
    """
    if isinstance(exc, PermissionDeniedError):
        return True
    return PERMISSION_DENIED_FRAGMENT in str(exc)


@dataclass(frozen=True)
class MountInfo:
    """A secrets engine mounted in Vault."""

    type: str
    description: str = ""
    accessor: str = ""
    options: dict[str, Any] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MountInfo:
        """Create mount info from a mount table entry."""
        return cls(
            type=data.get("type", ""),
            description=data.get("description") or "",
            accessor=data.get("accessor") or "",
            options=dict(data.get("options") or {}),
            config=dict(data.get("config") or {}),
        )


class SecretStore(ABC):
    """Abstract interface for secret store backends.

    Implementations must provide:
    - read_secret: Read the payload stored at a path
    - list_secrets: List the child keys under a path
    - write_secret / delete_secret: Modify a path
    - list_mounts: Return the mount table
    - is_authenticated / authenticate: Manage the session
    """

    @abstractmethod
    def read_secret(self, path: str) -> dict[str, Any] | None:
        """Read the secret at path.

        Args:
            path: Secret path, without leading separator

        Returns:
            The secret payload, or None if nothing is stored there

        Raises:
            PermissionDeniedError: If the token may not read the path
            ServerError: For other vault errors
        """
        ...

    @abstractmethod
    def list_secrets(self, path: str) -> list[str] | None:
        """List child keys under path.

        Keys ending in a separator are prefixes (directories).

        Returns:
            The keys, or None if the path is not listable
        """
        ...

    @abstractmethod
    def write_secret(self, path: str, data: dict[str, Any]) -> None:
        """Store data at path, replacing any existing payload."""
        ...

    @abstractmethod
    def delete_secret(self, path: str) -> None:
        """Delete the secret at path."""
        ...

    @abstractmethod
    def list_mounts(self) -> dict[str, MountInfo]:
        """Return the mount table, keyed by mount name (e.g. "secret/")."""
        ...

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Check if the store is authenticated."""
        ...

    @abstractmethod
    def authenticate(self) -> None:
        """Authenticate to the vault.

        Raises:
            AuthenticationError: If authentication fails
        """
        ...

    def lookup_token(self) -> dict[str, Any]:
        """Return information about the token in use."""
        return {}

    def ensure_authenticated(self) -> None:
        """Ensure store is authenticated, authenticating if needed.

        Raises:
            AuthenticationError: If authentication fails
        """
        if not self.is_authenticated():
            self.authenticate()
