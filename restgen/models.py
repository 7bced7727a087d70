"""Core data models shared across restgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class DependencyRecord:
    """A resolved build dependency of the host project."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None

    @property
    def coordinates(self) -> str:
        base = f"{self.group_id}:{self.artifact_id}"
        return f"{base}:{self.version}" if self.version else base


@dataclass(frozen=True)
class SourceFile:
    """Directory entry produced while walking a source root."""

    path: str
    is_directory: bool


@dataclass(frozen=True)
class SourceMatch:
    """A marker hit: the file that matched and the value extracted from it."""

    path: str
    value: Optional[str]


@dataclass(frozen=True)
class DetectionResult:
    """What the environment detector inferred about the host project."""

    framework_version: Optional[str] = None
    transport_component: Optional[str] = None
    has_companion_framework: bool = False
    entry_package: Optional[str] = None


@dataclass(frozen=True)
class OperationContext:
    """Route context handed to destination strategies."""

    operation_id: str
    method: str = "GET"
    path: str = "/"
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PluginCoordinates:
    """Coordinates of an external build plugin."""

    group_id: str
    artifact_id: str
    version: str

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass
class ExecutionEnvironment:
    """Host build handles the external tool executes within."""

    project: Optional[str] = None
    session: Optional[object] = None
    plugin_manager: Optional[object] = None


ConfigValue = Union[str, "GenerationConfig"]


@dataclass
class GenerationConfig:
    """Ordered tree of named parameters handed to the generation tool."""

    entries: Dict[str, ConfigValue] = field(default_factory=dict)

    def set(self, name: str, value: ConfigValue) -> None:
        self.entries[name] = value

    def set_if_present(self, name: str, value: Optional[object]) -> None:
        """Set ``name`` only when a value was supplied; absent values are omitted."""
        if value is None:
            return
        self.entries[name] = _stringify(value)

    def get(self, name: str) -> Optional[ConfigValue]:
        return self.entries.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, object]:
        result: Dict[str, object] = {}
        for name, value in self.entries.items():
            result[name] = value.to_dict() if isinstance(value, GenerationConfig) else value
        return result

    @classmethod
    def from_mapping(cls, mapping: Optional[Dict[str, object]]) -> "GenerationConfig":
        config = cls()
        for name, value in (mapping or {}).items():
            if isinstance(value, dict):
                config.set(str(name), cls.from_mapping(value))
            elif value is not None:
                config.set(str(name), _stringify(value))
        return config


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


AuthMap = Dict[str, str]
