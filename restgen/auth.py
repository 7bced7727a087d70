"""Decoding of the ``auth`` build parameter."""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import unquote_plus

from .models import AuthMap

_ENCODING = "utf-8"
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class MalformedAuthEntry(ValueError):
    """Raised internally for a segment whose escapes cannot be decoded."""


def parse_auth(raw: Optional[str]) -> AuthMap:
    """Decode ``key:value,key:value`` into a mapping.

    Keys and values are URL-decoded independently. Segments that do not split
    into exactly two parts, or whose escapes are malformed, are dropped.
    """
    auths: AuthMap = {}
    if not raw:
        return auths
    for segment in raw.split(","):
        parts = _split_pair(segment)
        if len(parts) != 2:
            continue
        try:
            key = _decode(parts[0])
            value = _decode(parts[1])
        except MalformedAuthEntry:
            continue
        auths[key] = value
    return auths


def _split_pair(segment: str) -> List[str]:
    parts = segment.split(":")
    # Trailing empty fields do not count as parts ("user:" is a single part).
    while parts and parts[-1] == "":
        parts.pop()
    return parts


def _decode(text: str) -> str:
    if _BAD_ESCAPE.search(text):
        raise MalformedAuthEntry(text)
    try:
        return unquote_plus(text, encoding=_ENCODING, errors="strict")
    except UnicodeDecodeError as exc:
        raise MalformedAuthEntry(text) from exc


__all__ = ["parse_auth"]
