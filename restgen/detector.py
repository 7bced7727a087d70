"""Infer the host project's runtime environment from dependencies and sources."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from jinja2 import Environment, StrictUndefined

from .dependencies import DependencyMetadata
from .logging import get_logger
from .models import DependencyRecord, DetectionResult
from .source_scanner import SourceTreeScanner

CAMEL_GROUP = "org.apache.camel"
CAMEL_SPRINGBOOT_GROUP = "org.apache.camel.springboot"
SPRING_BOOT_GROUP = "org.springframework.boot"

# Priority order: only breaks ties for a single artifact, never across dependencies.
DEFAULT_REST_CONSUMER_COMPONENTS: Tuple[str, ...] = (
    "platform-http",
    "servlet",
    "jetty",
    "undertow",
    "netty-http",
    "coap",
)

FALLBACK_COMPONENT = "platform-http"
FALLBACK_ARTIFACT = (CAMEL_GROUP, "camel-platform-http")
FALLBACK_SPRINGBOOT_ARTIFACT = (CAMEL_SPRINGBOOT_GROUP, "camel-platform-http-starter")

_DEPENDENCY_SNIPPET = Environment(
    undefined=StrictUndefined, keep_trailing_newline=True
).from_string(
    "\n\t\t<dependency>"
    "\n\t\t\t<groupId>{{ group_id }}</groupId>"
    "\n\t\t\t<artifactId>{{ artifact_id }}</artifactId>"
    "{% if version %}\n\t\t\t<version>{{ version }}</version>{% endif %}"
    "\n\t\t</dependency>\n"
)


def render_dependency_snippet(group_id: str, artifact_id: str, version: Optional[str]) -> str:
    """Render a pom.xml ``<dependency>`` block for the given coordinates."""
    return _DEPENDENCY_SNIPPET.render(
        group_id=group_id, artifact_id=artifact_id, version=version
    )


class EnvironmentDetector:
    """Derives a :class:`DetectionResult` from build metadata.

    Every detection degrades to ``None``/``False`` rather than guessing, and
    the detector holds no state between calls.
    """

    def __init__(
        self,
        dependencies: Iterable[DependencyRecord],
        source_roots: Sequence[Path | str] = (),
        *,
        scanner: SourceTreeScanner | None = None,
    ) -> None:
        self.dependencies = (
            dependencies
            if isinstance(dependencies, DependencyMetadata)
            else DependencyMetadata(dependencies)
        )
        self.source_roots = tuple(source_roots)
        self.scanner = scanner or SourceTreeScanner()
        self.logger = get_logger("detector")

    def detect(self) -> DetectionResult:
        companion = self.detect_companion_framework()
        return DetectionResult(
            framework_version=self.detect_framework_version(),
            transport_component=self.detect_transport_component(),
            has_companion_framework=companion,
            entry_package=self.detect_entry_package() if companion else None,
        )

    def detect_framework_version(self) -> Optional[str]:
        for record in self.dependencies.with_group(CAMEL_GROUP):
            if record.version:
                return record.version
        return None

    def detect_transport_component(self) -> Optional[str]:
        # The first declared matching dependency wins, even when a later one
        # names a higher-priority transport.
        for record in self.dependencies.with_group(CAMEL_GROUP, CAMEL_SPRINGBOOT_GROUP):
            for component in DEFAULT_REST_CONSUMER_COMPONENTS:
                if record.artifact_id.startswith(f"camel-{component}"):
                    return component
        return None

    def detect_companion_framework(self) -> bool:
        return any(True for _ in self.dependencies.with_group(SPRING_BOOT_GROUP))

    def detect_entry_package(self) -> Optional[str]:
        if not self.detect_companion_framework():
            return None
        for root in self.source_roots:
            # Marker files without a package line do not end the search.
            match = next((m for m in self.scanner.scan(root) if m.value), None)
            if match is not None:
                return match.value
        return None

    def find_appropriate_component(self) -> str:
        """Return the detected transport, or the fallback with a remediation hint."""
        component = self.detect_transport_component()
        if component is not None:
            self.logger.info("Detected Camel Rest component from classpath: %s", component)
            return component

        group_id, artifact_id = FALLBACK_ARTIFACT
        if self.detect_companion_framework():
            group_id, artifact_id = FALLBACK_SPRINGBOOT_ARTIFACT
        snippet = render_dependency_snippet(
            group_id, artifact_id, self.detect_framework_version()
        )
        self.logger.info(
            "Cannot detect Rest component from classpath. Will use %s as Rest component.",
            FALLBACK_COMPONENT,
        )
        self.logger.info("Add the following dependency in the Maven pom.xml file:\n%s\n", snippet)
        return FALLBACK_COMPONENT


__all__ = [
    "DEFAULT_REST_CONSUMER_COMPONENTS",
    "EnvironmentDetector",
    "FALLBACK_COMPONENT",
    "render_dependency_snippet",
]
