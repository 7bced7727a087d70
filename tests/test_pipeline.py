"""Tests for restgen.pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from restgen.codegen import ExternalToolFailure, GenerationRequest
from restgen.models import OperationContext
from restgen.pipeline import ScaffoldPipeline
from restgen.strategies import ClassNotResolvableError, DefaultDestinationGenerator


class RecordingExecutor:
    """Captures the requests handed to the external tool."""

    def __init__(self) -> None:
        self.requests: list[GenerationRequest] = []

    def __call__(self, request: GenerationRequest) -> None:
        self.requests.append(request)


SPRING_APP = """
package com.example.petstore;

import org.springframework.boot.autoconfigure.SpringBootApplication;

@SpringBootApplication
public class PetstoreApplication {}
"""


def _seed_project(builder, **generation: object) -> None:
    spec = builder.path() / "spec" / "openapi.yaml"
    config = {
        "project": {
            "dependencies": [
                "org.springframework.boot:spring-boot-starter-web:3.2.0",
                "org.apache.camel.springboot:camel-servlet-starter:4.4.0",
                "org.apache.camel:camel-core:4.4.0",
            ],
        },
        "generation": {"specification_uri": spec.as_posix(), **generation},
    }
    builder.write(
        {
            ".restgen.yml": yaml.safe_dump(config, sort_keys=False),
            "spec/openapi.yaml": "openapi: 3.0.0\npaths: {}\n",
            "src/main/java/com/example/petstore/PetstoreApplication.java": SPRING_APP,
        }
    )


def test_pipeline_builds_plan_without_model_generation(project_builder) -> None:
    _seed_project(project_builder)
    executor = RecordingExecutor()

    plan = ScaffoldPipeline(executor=executor).run(project_builder.path())

    assert plan is not None
    assert plan.component == "servlet"
    assert plan.detection.framework_version == "4.4.0"
    assert plan.detection.has_companion_framework is True
    assert plan.base_package == "com.example.petstore"
    assert plan.document == {"openapi": "3.0.0", "paths": {}}
    assert isinstance(plan.destination_generator, DefaultDestinationGenerator)
    assert plan.models_generated is False
    assert executor.requests == []


def test_pipeline_generates_models_when_package_configured(project_builder) -> None:
    _seed_project(
        project_builder,
        model_package="com.example.model",
        destination_to_syntax="seda:${operationId}",
        auth="X-Token:abc",
    )
    executor = RecordingExecutor()

    plan = ScaffoldPipeline(executor=executor).run(project_builder.path())

    assert plan.models_generated is True
    assert plan.auth == {"X-Token": "abc"}
    destination = plan.destination_generator.generate_destination_for(OperationContext("getPet"))
    assert destination == "seda:getPet"

    request = executor.requests[0]
    assert request.configuration.get("modelPackage") == "com.example.model"
    assert request.configuration.get("configOptions").get("hideGenerationTimestamp") == "true"
    assert request.environment.project == str(project_builder.path().resolve())


def test_pipeline_skip_short_circuits(project_builder) -> None:
    _seed_project(project_builder, skip=True)
    executor = RecordingExecutor()

    assert ScaffoldPipeline(executor=executor).run(project_builder.path()) is None
    assert executor.requests == []


def test_pipeline_loads_strategy_from_output_directory(project_builder) -> None:
    _seed_project(project_builder, destination_generator="acme_pipeline.Routes")
    project_builder.write(
        {
            "target/classes/acme_pipeline.py": """
            from restgen.strategies import DestinationGenerator


            class Routes(DestinationGenerator):
                def generate_destination_for(self, operation):
                    return "direct:custom-" + operation.operation_id
            """,
        }
    )

    plan = ScaffoldPipeline(executor=RecordingExecutor()).run(project_builder.path())

    destination = plan.destination_generator.generate_destination_for(OperationContext("x"))
    assert destination == "direct:custom-x"


def test_pipeline_propagates_strategy_errors(project_builder) -> None:
    _seed_project(project_builder, destination_generator="acme_absent.Routes")

    with pytest.raises(ClassNotResolvableError):
        ScaffoldPipeline(executor=RecordingExecutor()).run(project_builder.path())


def test_pipeline_propagates_tool_failure(project_builder) -> None:
    _seed_project(project_builder, model_package="com.example.model")

    def _failing(request: GenerationRequest) -> None:
        raise ExternalToolFailure("codegen exploded")

    with pytest.raises(ExternalToolFailure, match="codegen exploded"):
        ScaffoldPipeline(executor=_failing).run(project_builder.path())


def test_pipeline_rejects_missing_project(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ScaffoldPipeline().run(tmp_path / "missing")
