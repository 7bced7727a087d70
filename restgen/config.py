"""Configuration loading for restgen (.restgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .codegen import DEFAULT_CODEGEN_VERSION
from .dependencies import DependencyMetadata, load_project_dependencies

CONFIG_FILENAME = ".restgen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProjectConfig:
    """Host build facts: where things live and what is on the classpath."""

    root: Path
    descriptor: Optional[Path] = None
    build_directory: Path = Path("target")
    output_directory: Path = Path("target/classes")
    source_roots: List[Path] = field(default_factory=list)
    dependencies: DependencyMetadata = field(default_factory=DependencyMetadata)


@dataclass
class GenerationSettings:
    """Generation parameters as the build descriptor declares them."""

    specification_uri: str
    language: str = "java"
    model_output: Optional[str] = None
    model_package: Optional[str] = None
    model_name_prefix: Optional[str] = None
    model_name_suffix: Optional[str] = None
    model_with_xml: Optional[str] = "false"
    config_options: Optional[Dict[str, str]] = None
    codegen_version: str = DEFAULT_CODEGEN_VERSION
    destination_generator: Optional[str] = None
    destination_to_syntax: Optional[str] = None
    api_context_path: Optional[str] = None
    base_path: Optional[str] = None
    filter_operation: Optional[str] = None
    rest_configuration: bool = True
    client_request_validation: bool = False
    skip: bool = False
    auth: Optional[str] = None


@dataclass
class RestgenConfig:
    """Represents the settings defined in .restgen.yml."""

    project: ProjectConfig
    generation: GenerationSettings


def load_config(config_path: Path) -> RestgenConfig:
    """Load configuration from disk, falling back to build-file conventions."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    project_data = _as_dict(data.get("project"))
    generation_data = _as_dict(data.get("generation"))

    build_directory = root / (_as_str(project_data.get("build_directory")) or "target")
    output_str = _as_str(project_data.get("output_directory"))
    output_directory = root / output_str if output_str else build_directory / "classes"

    source_roots = [root / entry for entry in _as_str_list(project_data.get("source_roots"))]
    if not source_roots:
        source_roots = [root / "src" / "main" / "java"]

    if "dependencies" in project_data:
        raw_dependencies = project_data.get("dependencies")
        if not isinstance(raw_dependencies, list):
            raise ConfigError("project.dependencies must be a list")
        dependencies = DependencyMetadata.from_entries(raw_dependencies)
    else:
        dependencies = load_project_dependencies(root)

    descriptor_str = _as_str(project_data.get("descriptor"))
    descriptor = root / descriptor_str if descriptor_str else _default_descriptor(root)

    project = ProjectConfig(
        root=root,
        descriptor=descriptor,
        build_directory=build_directory,
        output_directory=output_directory,
        source_roots=source_roots,
        dependencies=dependencies,
    )

    spec_uri = _as_str(generation_data.get("specification_uri")) or str(
        root / "src" / "spec" / "openapi.json"
    )
    options_data = generation_data.get("config_options")
    if options_data is not None and not isinstance(options_data, dict):
        raise ConfigError("generation.config_options must be a mapping")

    generation = GenerationSettings(
        specification_uri=spec_uri,
        language=_as_str(generation_data.get("language")) or "java",
        model_output=_as_str(generation_data.get("model_output"))
        or str(build_directory / "generated-sources" / "openapi"),
        model_package=_as_str(generation_data.get("model_package")),
        model_name_prefix=_as_str(generation_data.get("model_name_prefix")),
        model_name_suffix=_as_str(generation_data.get("model_name_suffix")),
        model_with_xml=_as_flag(generation_data.get("model_with_xml"), default="false"),
        config_options=(
            {str(k): _as_str(v) or "" for k, v in options_data.items()}
            if isinstance(options_data, dict)
            else None
        ),
        codegen_version=_as_str(generation_data.get("codegen_version"))
        or DEFAULT_CODEGEN_VERSION,
        destination_generator=_as_str(generation_data.get("destination_generator")),
        destination_to_syntax=_as_str(generation_data.get("destination_to_syntax")),
        api_context_path=_as_str(generation_data.get("api_context_path")),
        base_path=_as_str(generation_data.get("base_path")),
        filter_operation=_as_str(generation_data.get("filter_operation")),
        rest_configuration=_as_bool(generation_data.get("rest_configuration"), True),
        client_request_validation=_as_bool(
            generation_data.get("client_request_validation"), False
        ),
        skip=_as_bool(generation_data.get("skip"), False),
        auth=_as_str(generation_data.get("auth")),
    )
    return RestgenConfig(project=project, generation=generation)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    project_path = config_path.parent if config_path.name == CONFIG_FILENAME else config_path
    if not project_path.exists():
        raise ConfigError(f"Project path not found: {config_path}")
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _default_descriptor(root: Path) -> Optional[Path]:
    pom = root / "pom.xml"
    return pom if pom.exists() else None


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_flag(value: Any, *, default: Optional[str]) -> Optional[str]:
    if value is None:
        return default
    return _as_str(value)


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return default


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GenerationSettings",
    "ProjectConfig",
    "RestgenConfig",
    "load_config",
]
