"""Configuration: Vault environment variables and vaultctl.toml.

The environment is read with pydantic-settings using the same variable names
as the official Vault CLI:

    VAULT_ADDR, VAULT_TOKEN, VAULT_TOKEN_FILE, VAULT_CACERT, VAULT_CAPATH,
    VAULT_SKIP_VERIFY, VAULT_NAMESPACE

Behaviour defaults live in vaultctl.toml (project) or
~/.config/vaultctl/config.toml (user):

    [vault]
    address = "https://vault.example.com:8200"
    mount_types = ["generic", "kv"]
    mount_cache_ttl = 60

    [template]
    engine = "text"
    mode = "0600"

    [output]
    mode = "0600"
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "vaultctl.toml"
USER_CONFIG_PATH = Path("~/.config/vaultctl/config.toml")

DEFAULT_MOUNT_TYPES = ("generic", "kv")
DEFAULT_MOUNT_CACHE_TTL = 60.0
DEFAULT_MODE = "0600"


class ConfigNotFoundError(Exception):
    """Configuration file not found."""

    pass


class VaultEnvironment(BaseSettings):
    """Vault connection settings taken from VAULT_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="VAULT_", extra="ignore")

    addr: str | None = None
    token: str | None = None
    token_file: str | None = None
    cacert: str | None = None
    capath: str | None = None
    skip_verify: bool = False
    namespace: str | None = None

    def token_files(self) -> list[Path]:
        """Candidate token files, in lookup order."""
        files = [Path("~/.vault-token").expanduser(), Path("/etc/vault-client/token")]
        if self.token_file:
            files.append(Path(self.token_file).expanduser())
        return files

    def resolve_token(self) -> str | None:
        """Return VAULT_TOKEN, or the contents of the first readable token file."""
        if self.token:
            logger.debug("client: using VAULT_TOKEN from environment")
            return self.token

        for token_file in self.token_files():
            if not token_file.is_file():
                logger.debug("client: no token file at %s", token_file)
                continue
            logger.debug("client: using token file %s", token_file)
            return token_file.read_text(encoding="utf-8").strip()
        return None

    def verify(self) -> bool | str:
        """TLS verification argument for the HTTP session."""
        if self.skip_verify:
            return False
        return self.cacert or self.capath or True


@dataclass
class VaultConfig:
    """Vault connection defaults."""

    address: str | None = None
    mount_types: list[str] = field(default_factory=lambda: list(DEFAULT_MOUNT_TYPES))
    mount_cache_ttl: float = DEFAULT_MOUNT_CACHE_TTL


@dataclass
class TemplateConfig:
    """Template command defaults."""

    engine: str = "text"
    mode: str = DEFAULT_MODE


@dataclass
class OutputConfig:
    """Output file defaults for cat and file get."""

    mode: str = DEFAULT_MODE


@dataclass
class VaultctlConfig:
    """Complete vaultctl configuration."""

    vault: VaultConfig = field(default_factory=VaultConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VaultctlConfig:
        """Create config from a dictionary (e.g., from vaultctl.toml).

        Unknown keys are ignored.
        """
        vault_section = data.get("vault", {})
        template_section = data.get("template", {})
        output_section = data.get("output", {})

        mount_types = vault_section.get("mount_types", list(DEFAULT_MOUNT_TYPES))
        if isinstance(mount_types, str):
            mount_types = [mount_types]

        return cls(
            vault=VaultConfig(
                address=vault_section.get("address"),
                mount_types=list(mount_types),
                mount_cache_ttl=float(
                    vault_section.get("mount_cache_ttl", DEFAULT_MOUNT_CACHE_TTL)
                ),
            ),
            template=TemplateConfig(
                engine=template_section.get("engine", "text"),
                mode=str(template_section.get("mode", DEFAULT_MODE)),
            ),
            output=OutputConfig(
                mode=str(output_section.get("mode", DEFAULT_MODE)),
            ),
        )


def find_config(start: Path | None = None) -> Path | None:
    """Find vaultctl.toml in start or its parents, then the user config.

    Returns:
        Path to the config file, or None if there is none
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate

    user_config = USER_CONFIG_PATH.expanduser()
    if user_config.is_file():
        return user_config
    return None


def load_config(path: Path | str | None = None) -> VaultctlConfig:
    """Load configuration from a TOML file.

    Args:
        path: Explicit config file; discovered with find_config() when None

    Returns:
        The parsed configuration, or defaults when no file exists

    Raises:
        ConfigNotFoundError: If an explicit path does not exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    if path is None:
        path = find_config()
        if path is None:
            return VaultctlConfig()

    path = Path(path)
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    logger.debug("config: loading %s", path)
    with path.open("rb") as f:
        data = tomllib.load(f)
    return VaultctlConfig.from_dict(data)

