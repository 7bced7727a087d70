"""Read-only access to the host project's resolved dependency list."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from .logging import get_logger
from .models import DependencyRecord

logger = get_logger("dependencies")

_PROPERTY_REF = re.compile(r"\$\{([^}]+)}")
_GRADLE_COORDINATE = re.compile(
    r"['\"]([\w\-.]+):([\w\-.]+)(?::([\w\-.${}]+))?['\"]"
)
_GRADLE_CONFIGURATIONS = ("implementation", "api", "compile", "runtimeOnly")


class DependencyMetadata(Sequence[DependencyRecord]):
    """Immutable, ordered view over dependency records."""

    def __init__(self, records: Iterable[DependencyRecord] = ()) -> None:
        self._records = tuple(records)

    def __getitem__(self, index):  # type: ignore[override]
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[DependencyRecord]:
        return iter(self._records)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DependencyMetadata):
            return self._records == other._records
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._records)

    def __repr__(self) -> str:
        return f"DependencyMetadata({list(self._records)!r})"

    def with_group(self, *group_ids: str) -> Iterator[DependencyRecord]:
        wanted = set(group_ids)
        return (record for record in self._records if record.group_id in wanted)

    @classmethod
    def from_entries(cls, entries: Iterable[object]) -> "DependencyMetadata":
        """Build metadata from ``group:artifact[:version]`` strings or mappings."""
        records: List[DependencyRecord] = []
        for entry in entries:
            record = _coerce_record(entry)
            if record is None:
                logger.debug("Ignoring unusable dependency entry: %r", entry)
                continue
            records.append(record)
        return cls(records)


def load_project_dependencies(root: Path) -> DependencyMetadata:
    """Read dependencies from ``pom.xml`` or a Gradle build script, in declaration order."""
    pom = root / "pom.xml"
    if pom.exists():
        return DependencyMetadata(parse_pom_dependencies(pom))
    for name in ("build.gradle", "build.gradle.kts"):
        script = root / name
        if script.exists():
            return DependencyMetadata(
                parse_gradle_dependencies(script.read_text(encoding="utf-8"))
            )
    return DependencyMetadata()


def parse_pom_dependencies(path: Path) -> List[DependencyRecord]:
    try:
        root = ET.fromstring(path.read_text(encoding="utf-8"))
    except (OSError, ET.ParseError) as exc:
        logger.warning("Unable to read %s: %s", path, exc)
        return []

    namespace = _detect_xml_namespace(root)

    def _tag(name: str) -> str:
        return f"{{{namespace}}}{name}" if namespace else name

    properties = _pom_properties(root, _tag)

    # Only direct project dependencies; dependencyManagement and plugin
    # dependencies are not on the project's classpath.
    container = root.find(_tag("dependencies"))
    if container is None:
        return []

    records: List[DependencyRecord] = []
    for dep in container.findall(_tag("dependency")):
        group = (dep.findtext(_tag("groupId")) or "").strip()
        artifact = (dep.findtext(_tag("artifactId")) or "").strip()
        version = (dep.findtext(_tag("version")) or "").strip()
        if not group or not artifact:
            continue
        records.append(
            DependencyRecord(
                group_id=_interpolate(group, properties),
                artifact_id=_interpolate(artifact, properties),
                version=_interpolate(version, properties) or None,
            )
        )
    return records


def parse_gradle_dependencies(content: str) -> List[DependencyRecord]:
    records: List[DependencyRecord] = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        if not any(token in line for token in _GRADLE_CONFIGURATIONS):
            continue
        match = _GRADLE_COORDINATE.search(line)
        if match:
            group, artifact, version = match.groups()
            records.append(DependencyRecord(group, artifact, version or None))
    return records


def _pom_properties(root: ET.Element, tag) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    version = root.findtext(tag("version"))
    if version is None:
        version = root.findtext(f"{tag('parent')}/{tag('version')}")
    if version:
        properties["project.version"] = version.strip()
    block = root.find(tag("properties"))
    if block is not None:
        for child in block:
            name = re.sub(r"^\{.*}", "", child.tag)
            properties[name] = (child.text or "").strip()
    return properties


def _interpolate(value: str, properties: Mapping[str, str]) -> str:
    return _PROPERTY_REF.sub(lambda m: properties.get(m.group(1), m.group(0)), value)


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


def _coerce_record(entry: object) -> Optional[DependencyRecord]:
    if isinstance(entry, DependencyRecord):
        return entry
    if isinstance(entry, str):
        parts = [part.strip() for part in entry.split(":")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            return None
        version = parts[2] if len(parts) > 2 and parts[2] else None
        return DependencyRecord(parts[0], parts[1], version)
    if isinstance(entry, Mapping):
        group = entry.get("group_id") or entry.get("groupId")
        artifact = entry.get("artifact_id") or entry.get("artifactId")
        version = entry.get("version")
        if not group or not artifact:
            return None
        return DependencyRecord(str(group), str(artifact), str(version) if version else None)
    return None


__all__ = [
    "DependencyMetadata",
    "load_project_dependencies",
    "parse_gradle_dependencies",
    "parse_pom_dependencies",
]
