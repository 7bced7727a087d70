"""Requests data-model generation from the external codegen build plugin."""

from __future__ import annotations

import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from jinja2 import Environment, StrictUndefined

from .logging import get_logger
from .models import ExecutionEnvironment, GenerationConfig, PluginCoordinates

CODEGEN_GROUP_ID = "io.swagger.codegen.v3"
CODEGEN_ARTIFACT_ID = "swagger-codegen-maven-plugin"
DEFAULT_CODEGEN_VERSION = "3.0.54"
GENERATE_GOAL = "generate"

# Forced to "true" in configOptions whatever the caller declares.
HIDE_TIMESTAMP_OPTION = "hideGenerationTimestamp"

_DISABLED_OUTPUTS = (
    "generateApis",
    "generateModelTests",
    "generateModelDocumentation",
    "generateSupportingFiles",
)

_PATH_PARAMETERS = ("inputSpec", "output")

_EXECUTION_POM = Environment(
    autoescape=True,
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
).from_string(
    """<?xml version="1.0" encoding="UTF-8"?>
{% macro render(tree, indent) %}
{% for name, value in tree.items() %}
{% if value is mapping %}
{{ indent }}<{{ name }}>
{{ render(value, indent ~ "  ") }}{{ indent }}</{{ name }}>
{% else %}
{{ indent }}<{{ name }}>{{ value }}</{{ name }}>
{% endif %}
{% endfor %}
{% endmacro %}
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>restgen</groupId>
  <artifactId>restgen-codegen</artifactId>
  <version>0</version>
  <packaging>pom</packaging>
  <build>
    <plugins>
      <plugin>
        <groupId>{{ plugin.group_id }}</groupId>
        <artifactId>{{ plugin.artifact_id }}</artifactId>
        <version>{{ plugin.version }}</version>
        <configuration>
{{ render(configuration, "          ") }}        </configuration>
      </plugin>
    </plugins>
  </build>
</project>
"""
)

logger = get_logger("codegen")


class ExternalToolFailure(RuntimeError):
    """Raised when the external generation tool does not complete successfully."""


@dataclass
class GenerationRequest:
    """Everything the executor needs to run one external goal."""

    plugin: PluginCoordinates
    goal: str
    configuration: GenerationConfig
    environment: ExecutionEnvironment


@dataclass
class ModelGenerationParameters:
    """Caller-declared parameters; ``None`` means "not declared"."""

    specification_uri: str
    model_output: Optional[str] = None
    model_package: Optional[str] = None
    model_name_prefix: Optional[str] = None
    model_name_suffix: Optional[str] = None
    model_with_xml: Optional[str] = None
    config_options: Optional[Dict[str, str]] = None
    codegen_version: str = DEFAULT_CODEGEN_VERSION


Executor = Callable[[GenerationRequest], None]


class GenerationOrchestrator:
    """Composes the configuration tree and hands it to an executor."""

    def __init__(
        self,
        parameters: ModelGenerationParameters,
        *,
        environment: ExecutionEnvironment | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.parameters = parameters
        self.environment = environment or ExecutionEnvironment()
        self._executor = executor or MavenToolExecutor()
        self.logger = get_logger("codegen")

    @property
    def plugin(self) -> PluginCoordinates:
        return PluginCoordinates(
            CODEGEN_GROUP_ID, CODEGEN_ARTIFACT_ID, self.parameters.codegen_version
        )

    def build_configuration(self, language: str) -> GenerationConfig:
        params = self.parameters
        config = GenerationConfig()
        config.set_if_present("inputSpec", params.specification_uri)
        config.set("language", language)
        for name in _DISABLED_OUTPUTS:
            config.set(name, "false")
        config.set_if_present("output", params.model_output)
        config.set_if_present("modelPackage", params.model_package)
        config.set_if_present("modelNamePrefix", params.model_name_prefix)
        config.set_if_present("modelNameSuffix", params.model_name_suffix)
        config.set_if_present("withXml", params.model_with_xml)

        options = GenerationConfig.from_mapping(dict(params.config_options or {}))
        options.set(HIDE_TIMESTAMP_OPTION, "true")
        config.set("configOptions", options)
        return config

    def generate(self, language: str) -> None:
        """Run the external goal synchronously; any failure aborts the run."""
        self.logger.info("Generating DTO classes using %s", self.plugin)
        request = GenerationRequest(
            plugin=self.plugin,
            goal=GENERATE_GOAL,
            configuration=self.build_configuration(language),
            environment=self.environment,
        )
        try:
            self._executor(request)
        except ExternalToolFailure:
            raise
        except Exception as exc:
            raise ExternalToolFailure(f"{request.plugin}:{request.goal} failed: {exc}") from exc


@dataclass
class MavenToolExecutor:
    """Runs a plugin goal through the ``mvn`` command line.

    The configuration tree is rendered as the plugin's ``<configuration>``
    block in a throwaway execution POM, so nested parameters such as
    ``configOptions`` reach the goal as real mojo parameters. Relative
    ``inputSpec`` and ``output`` paths are anchored at the host project.
    """

    executable: str = "mvn"
    extra_args: List[str] = field(default_factory=lambda: ["--batch-mode"])
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run

    def render_pom(self, request: GenerationRequest) -> str:
        configuration = request.configuration.to_dict()
        base = _project_dir(request.environment.project)
        if base:
            for name in _PATH_PARAMETERS:
                value = configuration.get(name)
                if isinstance(value, str):
                    configuration[name] = _anchor(value, base)
        return _EXECUTION_POM.render(plugin=request.plugin, configuration=configuration)

    def build_command(self, request: GenerationRequest, pom: Path) -> List[str]:
        plugin = request.plugin
        return [
            self.executable,
            *self.extra_args,
            "-f",
            str(pom),
            f"{plugin.group_id}:{plugin.artifact_id}:{plugin.version}:{request.goal}",
        ]

    def __call__(self, request: GenerationRequest) -> None:
        with tempfile.TemporaryDirectory(prefix="restgen-") as workdir:
            pom = Path(workdir) / "pom.xml"
            pom.write_text(self.render_pom(request), encoding="utf-8")
            args = self.build_command(request, pom)
            logger.debug("Running %s", " ".join(args))
            try:
                self.runner(
                    args,
                    check=True,
                    capture_output=True,
                    text=True,
                    cwd=_project_dir(request.environment.project),
                )
            except FileNotFoundError as exc:
                raise ExternalToolFailure(
                    f"Unable to locate '{self.executable}'. Install Maven or provide a custom executor."
                ) from exc
            except subprocess.CalledProcessError as exc:
                detail = (exc.stderr or exc.stdout or "").strip()
                raise ExternalToolFailure(
                    f"{request.plugin}:{request.goal} failed with exit code {exc.returncode}: {detail}"
                ) from exc


def _project_dir(project: Optional[str]) -> Optional[str]:
    if not project:
        return None
    path = Path(project)
    return str(path.parent if path.suffix == ".xml" else path)


def _anchor(value: str, base: str) -> str:
    if "://" in value or Path(value).is_absolute():
        return value
    return str(Path(base) / value)


__all__ = [
    "ExternalToolFailure",
    "GenerationOrchestrator",
    "GenerationRequest",
    "MavenToolExecutor",
    "ModelGenerationParameters",
]
