"""Tests for restgen.detector."""

from __future__ import annotations

import logging
from pathlib import Path

from restgen.detector import EnvironmentDetector, render_dependency_snippet
from restgen.models import DependencyRecord, DetectionResult


def _deps(*coordinates: str) -> list[DependencyRecord]:
    records = []
    for coordinate in coordinates:
        parts = coordinate.split(":")
        records.append(DependencyRecord(parts[0], parts[1], parts[2] if len(parts) > 2 else None))
    return records


def test_framework_version_absent_without_camel_dependency() -> None:
    detector = EnvironmentDetector(_deps("org.springframework.boot:spring-boot-starter:3.2.0"))

    assert detector.detect_framework_version() is None


def test_framework_version_skips_records_without_version() -> None:
    detector = EnvironmentDetector(
        _deps("org.apache.camel:camel-core", "org.apache.camel:camel-jetty:4.4.0")
    )

    assert detector.detect_framework_version() == "4.4.0"


def test_transport_uses_first_declared_dependency_not_highest_priority() -> None:
    detector = EnvironmentDetector(
        _deps(
            "org.apache.camel:camel-undertow:4.4.0",
            "org.apache.camel:camel-platform-http:4.4.0",
        )
    )

    assert detector.detect_transport_component() == "undertow"


def test_transport_matches_springboot_starters_and_ignores_other_groups() -> None:
    detector = EnvironmentDetector(
        _deps(
            "com.example:camel-jetty:1.0",
            "org.apache.camel.springboot:camel-servlet-starter:4.4.0",
        )
    )

    assert detector.detect_transport_component() == "servlet"


def test_transport_absent_when_nothing_matches() -> None:
    detector = EnvironmentDetector(_deps("org.apache.camel:camel-core:4.4.0"))

    assert detector.detect_transport_component() is None


def test_entry_package_only_scanned_with_spring_boot(tmp_path: Path) -> None:
    source = tmp_path / "src" / "main" / "java"
    app = source / "A" / "B" / "App.java"
    app.parent.mkdir(parents=True)
    app.write_text("package com.example.app;\n@SpringBootApplication\nclass App {}\n", encoding="utf-8")
    (source / "A" / "Foo.java").write_text("package com.example;\nclass Foo {}\n", encoding="utf-8")

    plain = EnvironmentDetector(_deps("org.apache.camel:camel-core:4.4.0"), [source])
    boot = EnvironmentDetector(
        _deps("org.springframework.boot:spring-boot-starter-web:3.2.0"), [source]
    )

    assert plain.detect_entry_package() is None
    assert boot.detect_entry_package() == "com.example.app"


def test_entry_package_tries_roots_in_order(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    (first / "NoPackage.java").write_text("@SpringBootApplication\nclass X {}\n", encoding="utf-8")
    second.mkdir()
    (second / "App.java").write_text("package from.second;\n@SpringBootApplication\n", encoding="utf-8")

    detector = EnvironmentDetector(
        _deps("org.springframework.boot:spring-boot:3.2.0"),
        [tmp_path / "missing", first, second],
    )

    assert detector.detect_entry_package() == "from.second"


def test_entry_package_keeps_scanning_past_marker_without_package(tmp_path: Path) -> None:
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "Stale.java").write_text("// @SpringBootApplication\n", encoding="utf-8")
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "App.java").write_text(
        "package com.example.app;\n@SpringBootApplication\nclass App {}\n", encoding="utf-8"
    )

    detector = EnvironmentDetector(
        _deps("org.springframework.boot:spring-boot:3.2.0"), [tmp_path]
    )

    assert detector.detect_entry_package() == "com.example.app"


def test_detect_is_repeatable(tmp_path: Path) -> None:
    detector = EnvironmentDetector(
        _deps(
            "org.apache.camel.springboot:camel-platform-http-starter:4.4.0",
            "org.springframework.boot:spring-boot-starter:3.2.0",
        ),
        [tmp_path],
    )

    first = detector.detect()
    assert first == detector.detect()
    assert first == DetectionResult(
        framework_version=None,
        transport_component="platform-http",
        has_companion_framework=True,
        entry_package=None,
    )


def test_fallback_component_logs_springboot_snippet(caplog) -> None:
    detector = EnvironmentDetector(
        _deps(
            "org.apache.camel:camel-core:4.4.0",
            "org.springframework.boot:spring-boot-starter:3.2.0",
        )
    )

    with caplog.at_level(logging.INFO, logger="restgen"):
        component = detector.find_appropriate_component()

    assert component == "platform-http"
    text = caplog.text
    assert "<groupId>org.apache.camel.springboot</groupId>" in text
    assert "<artifactId>camel-platform-http-starter</artifactId>" in text
    assert "<version>4.4.0</version>" in text


def test_fallback_component_without_version_or_spring_boot(caplog) -> None:
    detector = EnvironmentDetector([])

    with caplog.at_level(logging.INFO, logger="restgen"):
        component = detector.find_appropriate_component()

    assert component == "platform-http"
    assert "<artifactId>camel-platform-http</artifactId>" in caplog.text
    assert "<version>" not in caplog.text


def test_detected_component_is_returned_as_is() -> None:
    detector = EnvironmentDetector(_deps("org.apache.camel:camel-netty-http:4.4.0"))

    assert detector.find_appropriate_component() == "netty-http"


def test_render_dependency_snippet_layout() -> None:
    snippet = render_dependency_snippet("g", "a", "1")

    assert snippet == (
        "\n\t\t<dependency>\n\t\t\t<groupId>g</groupId>\n\t\t\t<artifactId>a</artifactId>"
        "\n\t\t\t<version>1</version>\n\t\t</dependency>\n"
    )
