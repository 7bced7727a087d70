"""Marker search over the host project's source roots."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set

from .logging import get_logger
from .models import SourceFile, SourceMatch

logger = get_logger("source_scanner")

DEFAULT_EXTENSION = ".java"
DEFAULT_MARKER = "@SpringBootApplication"
_PACKAGE_KEYWORD = "package "


def grab_package_name(content: str) -> Optional[str]:
    """Return the package named by the first ``package`` line, if any.

    This is a line-prefix search, not a parse: a ``package`` line inside a
    block comment still counts.
    """
    for line in content.split("\n"):
        line = line.strip()
        if line.startswith(_PACKAGE_KEYWORD):
            line = line[len(_PACKAGE_KEYWORD):].strip()
            if line.endswith(";"):
                line = line[:-1]
            return line
    return None


def _list_dir(directory: Path) -> List[SourceFile]:
    try:
        names = sorted(os.listdir(directory))
    except OSError:
        return []
    entries = []
    for name in names:
        path = directory / name
        entries.append(SourceFile(path=str(path), is_directory=path.is_dir()))
    return entries


class SourceTreeScanner:
    """Depth-first, lexically ordered search for files carrying a marker."""

    def __init__(
        self,
        *,
        extension: str = DEFAULT_EXTENSION,
        marker: str = DEFAULT_MARKER,
    ) -> None:
        self.extension = extension
        self.marker = marker

    def scan(self, root: Path | str) -> Iterator[SourceMatch]:
        """Yield marker matches under ``root`` lazily; a missing root yields nothing."""
        yield from self._walk(Path(root), set())

    def find_first(self, roots: Iterable[Path | str]) -> Optional[SourceMatch]:
        """Return the first match across ``roots`` in declaration order."""
        for root in roots:
            for match in self.scan(root):
                return match
        return None

    def _walk(self, directory: Path, visited: Set[str]) -> Iterator[SourceMatch]:
        real = os.path.realpath(directory)
        if real in visited:
            logger.debug("Skipping already visited directory %s", directory)
            return
        visited.add(real)
        for entry in _list_dir(directory):
            if entry.path.endswith(self.extension) and not entry.is_directory:
                match = self._inspect(Path(entry.path))
                if match is not None:
                    yield match
            elif entry.is_directory:
                yield from self._walk(Path(entry.path), visited)

    def _inspect(self, path: Path) -> Optional[SourceMatch]:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Skipping unreadable source file %s: %s", path, exc)
            return None
        if self.marker not in content:
            return None
        return SourceMatch(path=str(path), value=grab_package_name(content))


__all__ = ["SourceTreeScanner", "grab_package_name"]
