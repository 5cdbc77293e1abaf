"""Tests for the escaped delimited line codec."""

import pytest

from photo_albums.adapters.delimited_codec import decode_fields, encode_fields


def test_encode_escapes_delimiter_and_control_characters() -> None:
    line = encode_fields(["a;b", "c\nd", "tab\there", "back\\slash"])

    assert line == "a\\;b;c\\nd;tab\\there;back\\\\slash"
    assert "\n" not in line


def test_encode_writes_none_as_empty_field() -> None:
    assert encode_fields(["alice", None, "x"]) == "alice;;x"


@pytest.mark.parametrize(
    "fields",
    [
        ["plain", "", "with;delimiter"],
        ["\r\n\t\b\f;\\"],
        ["trailing\\", ";leading", ""],
        ["", "", ""],
    ],
)
def test_decode_reverses_encode(fields: list[str]) -> None:
    assert decode_fields(encode_fields(fields)) == fields


def test_decode_keeps_unknown_escape() -> None:
    assert decode_fields("a\\qb;c") == ["a\\qb", "c"]


def test_decode_keeps_trailing_lone_backslash() -> None:
    assert decode_fields("abc\\") == ["abc\\"]


def test_decode_empty_line_is_single_empty_field() -> None:
    assert decode_fields("") == [""]


def test_decode_counts_empty_trailing_field() -> None:
    assert decode_fields("a;b;") == ["a", "b", ""]


def test_custom_delimiter() -> None:
    line = encode_fields(["a,b", "c;d"], delimiter=",")

    assert line == "a\\,b,c;d"
    assert decode_fields(line, delimiter=",") == ["a,b", "c;d"]
