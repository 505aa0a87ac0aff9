from __future__ import annotations

import re

import pytest

from dotlive.core.exceptions import CompressionError
from dotlive.core.urls import decode_uri_component, encode_uri_component
from dotlive.state.codec import DEFLATE, LZSTRING, DeflateCodec, LZStringCodec, create_codec


BROWSER_TOKEN = "CYSw5gTghgDgFgAgOIIN4KggtAPgQIwQF8g"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "digraph G { a -> b }",
        'graph { "naïve" -- "日本語" [label="$\\alpha$"] }',
        "digraph {\n" + "  node%d;\n" * 200 + "}",
    ],
)
def test_compress_round_trip(text: str) -> None:
    codec = DeflateCodec()
    assert codec.decompress(codec.compress(text)) == text


def test_compressed_token_is_url_safe() -> None:
    token = DeflateCodec().compress("digraph { a -> b -> c; b -> d }" * 20)
    assert re.fullmatch(r"[A-Za-z0-9_-]+", token)


def test_compression_shrinks_repetitive_sources() -> None:
    source = "digraph { a -> b }\n" * 500
    assert len(DeflateCodec().compress(source)) < len(source) // 10


def test_decompress_rejects_garbage() -> None:
    with pytest.raises(CompressionError):
        DeflateCodec().decompress("!!not-a-token!!")


def test_decompress_rejects_non_deflate_payload() -> None:
    with pytest.raises(CompressionError):
        DeflateCodec().decompress("aGVsbG8gd29ybGQ")


def test_uri_component_matches_browser_encoding() -> None:
    encoded = encode_uri_component("digraph { a -> b; c [label=\"x&y\"] }")
    assert encoded == "digraph%20%7B%20a%20-%3E%20b%3B%20c%20%5Blabel%3D%22x%26y%22%5D%20%7D"
    assert encode_uri_component("(a)!*'~._-") == "(a)!*'~._-"
    assert decode_uri_component(encoded) == "digraph { a -> b; c [label=\"x&y\"] }"


def test_lzstring_reads_and_writes_browser_tokens() -> None:
    codec = LZStringCodec()
    assert codec.decompress(BROWSER_TOKEN) == "digraph G { a -> b }"
    assert codec.compress("digraph G { a -> b }") == BROWSER_TOKEN


@pytest.mark.parametrize(
    "text",
    [
        "",
        'graph { "naïve" -- "日本語" [label="$\\alpha$"] }',
        "digraph { smile [label=\"😀\"] }",
        "digraph {\n" + "  node%d;\n" * 200 + "}",
    ],
)
def test_lzstring_round_trip(text: str) -> None:
    codec = LZStringCodec()
    token = codec.compress(text)
    assert re.fullmatch(r"[A-Za-z0-9+\-$]*", token)
    assert codec.decompress(token) == text


@pytest.mark.parametrize("token", ["", "   ", "!!not-a-token!!"])
def test_lzstring_rejects_garbage(token: str) -> None:
    with pytest.raises(CompressionError):
        LZStringCodec().decompress(token)


def test_create_codec_by_name() -> None:
    assert isinstance(create_codec(), LZStringCodec)
    assert isinstance(create_codec(LZSTRING), LZStringCodec)
    assert isinstance(create_codec(DEFLATE), DeflateCodec)
    with pytest.raises(CompressionError, match="Unknown share codec"):
        create_codec("gzip")
