"""JSON codec."""

from __future__ import annotations

import json
from typing import Any

from vaultctl.codec.base import Codec
from vaultctl.errors import CodecError


class JSONCodec(Codec):
    """Substructure encoded as indented JSON."""

    def marshal(self, path: str, data: dict[str, Any]) -> bytes:
        try:
            return (json.dumps(data, indent=2) + "\n").encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CodecError(f"{path}: {e}") from e

    def unmarshal(self, raw: bytes) -> dict[str, Any]:
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, ValueError) as e:
            raise CodecError(f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CodecError("invalid JSON: expected an object")
        return data
