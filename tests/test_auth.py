"""Tests for restgen.auth."""

from __future__ import annotations

from restgen.auth import parse_auth


def test_parse_auth_empty_input_yields_empty_mapping() -> None:
    assert parse_auth("") == {}
    assert parse_auth(None) == {}


def test_parse_auth_drops_segments_without_a_pair() -> None:
    assert parse_auth("a:1,bad,b:2") == {"a": "1", "b": "2"}


def test_parse_auth_url_decodes_keys_and_values() -> None:
    parsed = parse_auth("Authorization:Bearer%20abc%2Cdef,X-Api%2DKey:p%C3%A4ss")

    assert parsed == {"Authorization": "Bearer abc,def", "X-Api-Key": "päss"}


def test_parse_auth_decodes_plus_as_space() -> None:
    assert parse_auth("token:a+b") == {"token": "a b"}


def test_parse_auth_drops_segments_with_extra_separators() -> None:
    assert parse_auth("a:b:c,d:") == {}


def test_parse_auth_drops_malformed_escapes_only() -> None:
    assert parse_auth("broken:%zz,ok:%41") == {"ok": "A"}
