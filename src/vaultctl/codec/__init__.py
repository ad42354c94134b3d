"""Codecs for typed secrets.

A secret carrying a "__TYPE__" key is typed: the key names the codec that
turns the rest of the payload into file contents (marshal) and back
(unmarshal).
"""

from __future__ import annotations

from vaultctl.codec.base import (
    CODEC_TYPE_KEY,
    Codec,
    CodecRegistry,
    MarshalingNotSupported,
    UnmarshalingNotSupported,
)
from vaultctl.codec.file_codec import FILE_TYPE, FileCodec
from vaultctl.codec.json_codec import JSONCodec
from vaultctl.codec.yaml_codec import YAMLCodec


def default_registry() -> CodecRegistry:
    """Create a registry with the built-in json, yaml and file codecs."""
    registry = CodecRegistry()
    registry.register("json", JSONCodec())
    registry.register("yaml", YAMLCodec())
    registry.register(FILE_TYPE, FileCodec())
    return registry


__all__ = [
    "CODEC_TYPE_KEY",
    "Codec",
    "CodecRegistry",
    "FileCodec",
    "JSONCodec",
    "MarshalingNotSupported",
    "UnmarshalingNotSupported",
    "YAMLCodec",
    "default_registry",
]
