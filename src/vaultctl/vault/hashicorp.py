"""HashiCorp Vault secret store."""

from __future__ import annotations

import logging
from typing import Any

import hvac
import requests
from hvac.exceptions import Forbidden, InvalidPath, Unauthorized, VaultError as HvacError

from vaultctl.errors import AuthenticationError, PermissionDeniedError, ServerError
from vaultctl.vault.base import MountInfo, SecretStore

logger = logging.getLogger(__name__)


class HashiCorpVaultStore(SecretStore):
    """HashiCorp Vault implementation over the logical API.

    Paths are used as-is (``secret/foo``), so any secrets engine that speaks
    read/list/write/delete works, the generic and KV v1 engines in particular.
    """

    def __init__(
        self,
        url: str | None,
        token: str | None = None,
        verify: bool | str = True,
        namespace: str | None = None,
    ):
        """Initialize the HashiCorp Vault store.

        Args:
            url: Vault server URL (e.g., "https://vault.example.com:8200")
            token: Authentication token
            verify: TLS verification flag, or path to a CA bundle
            namespace: Vault Enterprise namespace
        """
        self.url = url
        self.token = token
        self.verify = verify
        self.namespace = namespace
        self._client: hvac.Client | None = None

    @property
    def client(self) -> hvac.Client:
        """The underlying hvac client, created on first use."""
        if self._client is None:
            self._client = hvac.Client(
                url=self.url,
                token=self.token,
                verify=self.verify,
                namespace=self.namespace,
            )
        return self._client

    def authenticate(self) -> None:
        """Check the configured token against the server."""
        if not self.token:
            raise AuthenticationError(
                "No Vault token provided. Set VAULT_TOKEN or VAULT_TOKEN_FILE."
            )

        try:
            if not self.client.is_authenticated():
                raise AuthenticationError("Vault token is invalid or expired")
        except (Unauthorized, Forbidden) as e:
            raise AuthenticationError(f"Vault authentication failed: {e}") from e
        except requests.RequestException as e:
            raise ServerError(f"Vault connection error: {e}") from e

    def is_authenticated(self) -> bool:
        """Check if client is authenticated."""
        if self._client is None:
            return False
        try:
            return self._client.is_authenticated()
        except (HvacError, requests.RequestException):
            return False

    def _call(self, what: str, path: str, func, *args, **kwargs):
        logger.debug("vault: %s %r", what, path)
        try:
            return func(*args, **kwargs)
        except Forbidden as e:
            raise PermissionDeniedError(f"{path}: {e}") from e
        except Unauthorized as e:
            raise AuthenticationError(f"{path}: {e}") from e
        except InvalidPath:
            return None
        except HvacError as e:
            raise ServerError(f"{path}: {e}") from e
        except requests.RequestException as e:
            raise ServerError(f"Vault connection error: {e}") from e

    def read_secret(self, path: str) -> dict[str, Any] | None:
        response = self._call("read", path, self.client.read, path)
        if not response:
            return None
        data = response.get("data")
        return dict(data) if data is not None else None

    def list_secrets(self, path: str) -> list[str] | None:
        response = self._call("list", path, self.client.list, path)
        if not response:
            return None
        keys = response.get("data", {}).get("keys")
        return list(keys) if keys is not None else None

    def write_secret(self, path: str, data: dict[str, Any]) -> None:
        self._call("write", path, self.client.write_data, path, data=data)

    def delete_secret(self, path: str) -> None:
        self._call("delete", path, self.client.delete, path)

    def list_mounts(self) -> dict[str, MountInfo]:
        response = self._call(
            "mounts", "sys/mounts", self.client.sys.list_mounted_secrets_engines
        )
        table = (response or {}).get("data", response) or {}
        return {
            name: MountInfo.from_dict(entry)
            for name, entry in table.items()
            if isinstance(entry, dict) and "type" in entry
        }

    def lookup_token(self) -> dict[str, Any]:
        response = self._call(
            "lookup-self", "auth/token/lookup-self", self.client.auth.token.lookup_self
        )
        data = dict((response or {}).get("data") or {})
        data.pop("id", None)
        return data
