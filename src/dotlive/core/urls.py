"""Percent-encoding helpers matching browser ``encodeURIComponent`` semantics."""

from __future__ import annotations

from urllib.parse import quote, unquote


# Characters encodeURIComponent leaves untouched besides ASCII alphanumerics and "-_.~".
_URI_COMPONENT_SAFE = "!*'()"


def encode_uri_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE, errors="surrogatepass")


def decode_uri_component(text: str) -> str:
    return unquote(text, errors="surrogatepass")


__all__ = ["decode_uri_component", "encode_uri_component"]
