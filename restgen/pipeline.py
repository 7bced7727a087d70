"""Scaffold pipeline: detect, load the strategy, request model generation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .auth import parse_auth
from .codegen import Executor, GenerationOrchestrator, ModelGenerationParameters
from .config import RestgenConfig, load_config
from .detector import EnvironmentDetector
from .logging import get_logger
from .models import AuthMap, DetectionResult, ExecutionEnvironment
from .source_scanner import SourceTreeScanner
from .specdoc import SpecificationLocation, load_specification, resolve_specification
from .strategies import DefaultDestinationGenerator, DestinationGenerator, StrategyLoader


@dataclass
class ScaffoldPlan:
    """Inputs a route generator needs once detection and loading succeeded."""

    component: str
    detection: DetectionResult
    destination_generator: DestinationGenerator
    specification: SpecificationLocation
    document: Dict[str, Any]
    auth: AuthMap
    base_package: Optional[str]
    api_context_path: Optional[str]
    base_path: Optional[str]
    filter_operation: Optional[str]
    rest_configuration: bool
    client_request_validation: bool
    models_generated: bool


class ScaffoldPipeline:
    """Coordinates one generation run for a host project."""

    def __init__(
        self,
        *,
        scanner: SourceTreeScanner | None = None,
        strategy_loader: StrategyLoader | None = None,
        executor: Executor | None = None,
        session: object | None = None,
        plugin_manager: object | None = None,
    ) -> None:
        self.scanner = scanner or SourceTreeScanner()
        self.strategy_loader = strategy_loader or StrategyLoader()
        self.executor = executor
        self.session = session
        self.plugin_manager = plugin_manager
        self.logger = get_logger("pipeline")

    def run(self, path: str | Path) -> Optional[ScaffoldPlan]:
        """Load ``.restgen.yml`` from ``path`` and execute the run."""
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        return self.execute(load_config(root))

    def detect(self, config: RestgenConfig) -> DetectionResult:
        return self._detector(config).detect()

    def execute(self, config: RestgenConfig) -> Optional[ScaffoldPlan]:
        settings = config.generation
        if settings.skip:
            self.logger.info("Skipping restgen execution")
            return None

        self.logger.info("Starting scaffold run for %s", config.project.root)
        detector = self._detector(config)
        detection = detector.detect()
        component = detector.find_appropriate_component()

        auth = parse_auth(settings.auth)
        document = load_specification(settings.specification_uri, auth)
        generator = self._destination_generator(config)

        models_generated = False
        if settings.model_package:
            self._generate_models(config)
            models_generated = True
        else:
            self.logger.debug("No model package configured; skipping DTO generation")

        return ScaffoldPlan(
            component=component,
            detection=detection,
            destination_generator=generator,
            specification=resolve_specification(settings.specification_uri),
            document=document,
            auth=auth,
            base_package=detection.entry_package,
            api_context_path=settings.api_context_path,
            base_path=settings.base_path,
            filter_operation=settings.filter_operation,
            rest_configuration=settings.rest_configuration,
            client_request_validation=settings.client_request_validation,
            models_generated=models_generated,
        )

    def _detector(self, config: RestgenConfig) -> EnvironmentDetector:
        return EnvironmentDetector(
            config.project.dependencies,
            config.project.source_roots,
            scanner=self.scanner,
        )

    def _destination_generator(self, config: RestgenConfig) -> DestinationGenerator:
        settings = config.generation
        if settings.destination_generator:
            return self.strategy_loader.load(
                settings.destination_generator, config.project.output_directory
            )
        return DefaultDestinationGenerator(settings.destination_to_syntax)

    def _generate_models(self, config: RestgenConfig) -> None:
        settings = config.generation
        parameters = ModelGenerationParameters(
            specification_uri=settings.specification_uri,
            model_output=settings.model_output,
            model_package=settings.model_package,
            model_name_prefix=settings.model_name_prefix,
            model_name_suffix=settings.model_name_suffix,
            model_with_xml=settings.model_with_xml,
            config_options=settings.config_options,
            codegen_version=settings.codegen_version,
        )
        descriptor = config.project.descriptor
        environment = ExecutionEnvironment(
            project=str(descriptor) if descriptor else str(config.project.root),
            session=self.session,
            plugin_manager=self.plugin_manager,
        )
        orchestrator = GenerationOrchestrator(
            parameters, environment=environment, executor=self.executor
        )
        orchestrator.generate(settings.language)


__all__ = ["ScaffoldPipeline", "ScaffoldPlan"]
