"""File codec: raw bytes stored base64 encoded under "contents"."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from vaultctl.codec.base import CODEC_TYPE_KEY, Codec
from vaultctl.errors import CodecError

FILE_TYPE = "file"
FILE_CONTENTS_KEY = "contents"
LINE_LENGTH = 64


def encode_contents(raw: bytes) -> str:
    """Base64 encode raw, wrapped at 64 columns with a newline after every line."""
    encoded = base64.b64encode(raw).decode("ascii")
    return "".join(
        encoded[i : i + LINE_LENGTH] + "\n" for i in range(0, len(encoded), LINE_LENGTH)
    )


def decode_contents(contents: str) -> bytes:
    """Reverse of encode_contents; line breaks are ignored."""
    try:
        return base64.b64decode("".join(contents.split()), validate=True)
    except binascii.Error as e:
        raise CodecError(f"invalid file contents: {e}") from e


class FileCodec(Codec):
    """A whole file as a secret."""

    def marshal(self, path: str, data: dict[str, Any]) -> bytes:
        contents = data.get(FILE_CONTENTS_KEY)
        if not isinstance(contents, str):
            raise CodecError(f'{path}: file contents key "{FILE_CONTENTS_KEY}" missing')
        return decode_contents(contents)

    def unmarshal(self, raw: bytes) -> dict[str, Any]:
        return {
            CODEC_TYPE_KEY: FILE_TYPE,
            FILE_CONTENTS_KEY: encode_contents(raw),
        }
