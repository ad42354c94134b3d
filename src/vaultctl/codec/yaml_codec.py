"""YAML codec."""

from __future__ import annotations

from typing import Any

import yaml

from vaultctl.codec.base import Codec
from vaultctl.errors import CodecError


class YAMLCodec(Codec):
    """Substructure encoded as block-style YAML."""

    def marshal(self, path: str, data: dict[str, Any]) -> bytes:
        try:
            return yaml.safe_dump(data, default_flow_style=False).encode("utf-8")
        except yaml.YAMLError as e:
            raise CodecError(f"{path}: {e}") from e

    def unmarshal(self, raw: bytes) -> dict[str, Any]:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise CodecError(f"invalid YAML: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise CodecError("invalid YAML: expected a mapping")
        return data
