"""Error taxonomy and process exit codes."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes returned by every command."""

    SUCCESS = 0
    SYNTAX = 1
    CLIENT = 2
    SERVER = 3
    SYSTEM = 4
    CODEC = 5


class VaultError(Exception):
    """Base exception for vaultctl operations."""

    exit_code = ExitCode.SERVER


class ArgumentError(VaultError):
    """Invalid command arguments or flags."""

    exit_code = ExitCode.SYNTAX


class ClientSetupError(VaultError):
    """The Vault client could not be configured."""

    exit_code = ExitCode.CLIENT


class AuthenticationError(ClientSetupError):
    """Authentication to vault failed."""

    pass


class ServerError(VaultError):
    """A remote call to Vault failed."""

    exit_code = ExitCode.SERVER


class PermissionDeniedError(ServerError):
    """Vault refused the request for lack of permission."""

    pass


class SecretNotFoundError(VaultError):
    """Secret not found in vault."""

    exit_code = ExitCode.SYNTAX


class KeyNotFoundError(SecretNotFoundError):
    """A key is missing from an otherwise existing secret."""

    pass


class EntryNotFoundError(SecretNotFoundError):
    """Nothing exists at a path: no secret, prefix or mount."""

    pass


class GlobError(VaultError):
    """Unsupported glob pattern."""

    exit_code = ExitCode.SYNTAX


class TemplateError(VaultError):
    """A template failed to parse or execute."""

    exit_code = ExitCode.SYNTAX


class LocalIOError(VaultError):
    """Local file or terminal I/O failed."""

    exit_code = ExitCode.SYSTEM


class CodecError(VaultError):
    """Codec missing, or marshaling/unmarshaling failed."""

    exit_code = ExitCode.CODEC
