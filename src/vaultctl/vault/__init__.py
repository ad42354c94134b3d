"""Secret store interfaces."""

from __future__ import annotations

from pydantic import ValidationError

from vaultctl.config import VaultConfig, VaultEnvironment
from vaultctl.errors import ClientSetupError
from vaultctl.vault.base import (
    PERMISSION_DENIED_FRAGMENT,
    MountInfo,
    SecretStore,
    is_permission_denied,
)


def get_secret_store(
    environment: VaultEnvironment | None = None,
    config: VaultConfig | None = None,
) -> SecretStore:
    """Factory to create the HashiCorp Vault store.

    Args:
        environment: VAULT_* settings; read from the process environment if None
        config: vaultctl.toml defaults, used where the environment is silent

    Returns:
        Configured SecretStore instance

    Raises:
        ClientSetupError: If the environment cannot be turned into a client
    """
    from vaultctl.vault.hashicorp import HashiCorpVaultStore

    try:
        environment = environment or VaultEnvironment()
    except ValidationError as e:
        raise ClientSetupError(f"invalid Vault environment: {e}") from e

    try:
        token = environment.resolve_token()
    except OSError as e:
        raise ClientSetupError(f"unable to read token: {e}") from e
    if not token:
        raise ClientSetupError(
            "No Vault token found. Set VAULT_TOKEN or VAULT_TOKEN_FILE, or run vault login."
        )

    url = environment.addr or (config.address if config else None)

    return HashiCorpVaultStore(
        url=url,
        token=token,
        verify=environment.verify(),
        namespace=environment.namespace,
    )


__all__ = [
    "PERMISSION_DENIED_FRAGMENT",
    "MountInfo",
    "SecretStore",
    "get_secret_store",
    "is_permission_denied",
]
