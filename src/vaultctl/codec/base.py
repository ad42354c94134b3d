"""Codec interface and registry for typed secrets."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any

from vaultctl.errors import CodecError

# Key in a secret payload naming the codec that owns it
CODEC_TYPE_KEY = "__TYPE__"


class Codec(ABC):
    """Converts between a secret payload and its file representation."""

    @abstractmethod
    def marshal(self, path: str, data: dict[str, Any]) -> bytes:
        """Encode the payload stored at path.

        Raises:
            CodecError: If the payload cannot be encoded
        """
        ...

    @abstractmethod
    def unmarshal(self, raw: bytes) -> dict[str, Any]:
        """Decode raw bytes into a payload.

        Raises:
            CodecError: If the input cannot be decoded
        """
        ...


class MarshalingNotSupported:
    """Mixin for codecs that can only unmarshal."""

    def marshal(self, path: str, data: dict[str, Any]) -> bytes:
        raise CodecError("marshaling not supported by codec")


class UnmarshalingNotSupported:
    """Mixin for codecs that can only marshal."""

    def unmarshal(self, raw: bytes) -> dict[str, Any]:
        raise CodecError("unmarshaling not supported by codec")


class CodecRegistry:
    """Named codecs, looked up by the value of the __TYPE__ key."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._codecs: dict[str, Codec] = {}

    def register(self, name: str, codec: Codec) -> None:
        """Add a new named codec.

        Raises:
            CodecError: If name is already registered
        """
        with self._lock:
            existing = self._codecs.get(name)
            if existing is not None:
                raise CodecError(
                    f"codec {name!r} already registered as {type(existing).__name__}"
                )
            self._codecs[name] = codec

    def replace(self, name: str, codec: Codec) -> bool:
        """Replace or add a named codec; returns whether it existed."""
        with self._lock:
            exists = name in self._codecs
            self._codecs[name] = codec
            return exists

    def codec_for(self, name: str) -> Codec:
        """Return the codec registered as name.

        Raises:
            CodecError: If there is no such codec
        """
        with self._lock:
            codec = self._codecs.get(name)
        if codec is None:
            raise CodecError(f"no codec available for type {name!r}")
        return codec

    def names(self) -> list[str]:
        """Registered codec names, sorted."""
        with self._lock:
            return sorted(self._codecs)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._codecs
