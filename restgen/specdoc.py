"""Locating and reading the API description document."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, url2pathname, urlopen

import yaml

from .logging import get_logger
from .models import AuthMap

logger = get_logger("specdoc")

_URL_SCHEMES = {"http", "https", "file"}

_CORE_TAG_PREFIX = "tag:yaml.org,2002:"
ALLOWED_TAGS = frozenset(
    _CORE_TAG_PREFIX + name
    for name in ("null", "bool", "int", "float", "str", "seq", "map", "timestamp", "merge")
)


class SpecificationError(RuntimeError):
    """Raised when the API description cannot be read or is not acceptable."""


@dataclass(frozen=True)
class SpecificationLocation:
    """Where the API description lives."""

    uri: str
    remote: bool

    @property
    def path(self) -> Optional[Path]:
        if self.remote:
            parsed = urlparse(self.uri)
            if parsed.scheme == "file":
                return Path(url2pathname(parsed.path))
            return None
        return Path(self.uri)


def resolve_specification(uri: str) -> SpecificationLocation:
    """Classify ``uri`` as a URL or a local filesystem path."""
    parsed = urlparse(uri)
    remote = parsed.scheme.lower() in _URL_SCHEMES and bool(parsed.netloc or parsed.path)
    return SpecificationLocation(uri=uri, remote=remote)


def load_specification(
    uri: str, auth: AuthMap | None = None, *, timeout: float = 60.0
) -> Dict[str, Any]:
    """Read the document at ``uri`` into a mapping without validating its schema."""
    location = resolve_specification(uri)
    text = _read(location, auth or {}, timeout)
    data = parse_document(text, source=uri)
    if not isinstance(data, dict):
        raise SpecificationError(f"API description {uri} must contain a mapping at the root")
    return data


def parse_document(text: str, *, source: str = "<string>") -> Any:
    """Parse JSON or YAML text, rejecting YAML tags outside :data:`ALLOWED_TAGS`."""
    stripped = text.lstrip()
    if stripped.startswith(("{", "[")):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Flow-style YAML also starts with a brace.
            pass
    return _load_yaml(text, source)


class _AllowListLoader(yaml.SafeLoader):
    """Safe loader that refuses any tag that is not explicitly allowed."""


def _load_yaml(text: str, source: str) -> Any:
    loader = _AllowListLoader(text)
    try:
        node = loader.get_single_node()
        if node is None:
            return None
        for tagged in _walk(node):
            if tagged.tag not in ALLOWED_TAGS:
                raise SpecificationError(
                    f"Tag {tagged.tag} is not allowed in API description {source}"
                )
        return loader.construct_document(node)
    except yaml.YAMLError as exc:
        raise SpecificationError(f"Failed to parse {source}: {exc}") from exc
    finally:
        loader.dispose()


def _walk(node: yaml.Node) -> Iterator[yaml.Node]:
    seen = set()
    stack = [node]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        if isinstance(current, yaml.SequenceNode):
            stack.extend(current.value)
        elif isinstance(current, yaml.MappingNode):
            for key, value in current.value:
                stack.extend((key, value))


def _read(location: SpecificationLocation, auth: AuthMap, timeout: float) -> str:
    if not location.remote:
        path = Path(location.uri)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SpecificationError(f"Unable to read API description {path}: {exc}") from exc

    request = Request(location.uri, headers=dict(auth), method="GET")
    logger.debug("Fetching API description from %s", location.uri)
    try:
        with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        raise SpecificationError(
            f"Fetching {location.uri} failed with status {exc.code}: {exc.reason}"
        ) from exc
    except (URLError, OSError) as exc:
        reason = getattr(exc, "reason", exc)
        raise SpecificationError(f"Fetching {location.uri} failed: {reason}") from exc
    return raw.decode("utf-8")


__all__ = [
    "ALLOWED_TAGS",
    "SpecificationError",
    "SpecificationLocation",
    "load_specification",
    "parse_document",
    "resolve_specification",
]
