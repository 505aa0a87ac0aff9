"""Reversible compression of source text into URL-safe tokens.

`LZStringCodec` produces the same tokens as lz-string's
`compressToEncodedURIComponent`, so links interoperate with the browser editor.
`DeflateCodec` is a denser alternative readable only by dotlive.
"""

from __future__ import annotations

import base64
import binascii
from typing import Protocol, runtime_checkable
import zlib

from lzstring import LZString

from dotlive.core.exceptions import CompressionError


LZSTRING = "lzstring"
DEFLATE = "deflate"


@runtime_checkable
class CompressionCodec(Protocol):
    def compress(self, text: str) -> str: ...

    def decompress(self, token: str) -> str: ...


class DeflateCodec:
    """Raw deflate wrapped in unpadded URL-safe base64.

    Text is encoded with ``surrogatepass`` so that every Python string survives
    a round-trip, lone surrogates included.
    """

    def __init__(self, level: int = 9) -> None:
        self.level = level

    def compress(self, text: str) -> str:
        try:
            raw = text.encode("utf-8", errors="surrogatepass")
        except UnicodeEncodeError as exc:  # pragma: no cover - surrogatepass covers str
            raise CompressionError("Source text cannot be encoded for sharing") from exc
        compressor = zlib.compressobj(self.level, zlib.DEFLATED, -zlib.MAX_WBITS)
        payload = compressor.compress(raw) + compressor.flush()
        return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")

    def decompress(self, token: str) -> str:
        token = token.strip()
        padding = (-len(token)) % 4
        if padding:
            token += "=" * padding
        try:
            payload = base64.urlsafe_b64decode(token)
        except (binascii.Error, ValueError) as exc:
            raise CompressionError("Compressed content is not valid base64") from exc

        last_error: Exception | None = None
        for wbits in (-zlib.MAX_WBITS, zlib.MAX_WBITS):
            try:
                data = zlib.decompress(payload, wbits=wbits)
            except zlib.error as exc:
                last_error = exc
                continue
            try:
                return data.decode("utf-8", errors="surrogatepass")
            except UnicodeDecodeError as exc:
                raise CompressionError("Compressed content is not UTF-8 text") from exc

        raise CompressionError("Unable to decompress shared content") from last_error


def _to_code_units(text: str) -> str:
    # lz-string works on UTF-16 code units; astral characters become surrogate pairs.
    data = text.encode("utf-16-le", errors="surrogatepass")
    return "".join(
        chr(int.from_bytes(data[index : index + 2], "little")) for index in range(0, len(data), 2)
    )


def _from_code_units(units: str) -> str:
    data = b"".join(ord(unit).to_bytes(2, "little") for unit in units)
    return data.decode("utf-16-le", errors="surrogatepass")


class LZStringCodec:
    """lz-string ``EncodedURIComponent`` tokens, as used by the browser editor."""

    def __init__(self) -> None:
        self._lz = LZString()

    def compress(self, text: str) -> str:
        try:
            return self._lz.compressToEncodedURIComponent(_to_code_units(text))
        except (TypeError, ValueError, OverflowError) as exc:
            raise CompressionError("Source text cannot be compressed for sharing") from exc

    def decompress(self, token: str) -> str:
        token = token.strip()
        if not token:
            raise CompressionError("Compressed content is empty")
        try:
            units = self._lz.decompressFromEncodedURIComponent(token)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise CompressionError("Unable to decompress shared content") from exc
        if units is None:
            raise CompressionError("Unable to decompress shared content")
        try:
            return _from_code_units(units)
        except (UnicodeDecodeError, OverflowError) as exc:
            raise CompressionError("Compressed content is not valid text") from exc


def create_codec(name: str = LZSTRING) -> CompressionCodec:
    """Return the share-link codec registered under ``name``."""
    if name == LZSTRING:
        return LZStringCodec()
    if name == DEFLATE:
        return DeflateCodec()
    raise CompressionError(f"Unknown share codec '{name}'")


__all__ = [
    "DEFLATE",
    "LZSTRING",
    "CompressionCodec",
    "DeflateCodec",
    "LZStringCodec",
    "create_codec",
]
