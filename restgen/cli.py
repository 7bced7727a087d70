"""CLI entrypoints for restgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .codegen import ExternalToolFailure
from .config import ConfigError, load_config
from .logging import configure_logging
from .pipeline import ScaffoldPipeline
from .specdoc import SpecificationError
from .strategies import ClassResolutionError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="restgen",
        description="Detect the REST transport of a project and generate model classes.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser(
        "detect",
        help="Report the detected framework version, transport and entry package.",
    )
    _add_verbose_option(detect_parser, suppress_default=True)
    _add_path_argument(detect_parser)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Run detection, load the destination strategy and generate model classes.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_path_argument(generate_parser)
    generate_parser.add_argument(
        "--model-package",
        default=None,
        help="Override generation.model_package from .restgen.yml.",
    )
    generate_parser.add_argument(
        "--skip",
        action="store_true",
        help="Skip the run entirely.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for restgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    pipeline = ScaffoldPipeline()

    try:
        config = load_config(Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "detect":
        result = pipeline.detect(config)
        print(f"framework version: {result.framework_version or '(unknown)'}")
        print(f"transport component: {result.transport_component or '(unknown)'}")
        print(f"spring boot: {'yes' if result.has_companion_framework else 'no'}")
        print(f"entry package: {result.entry_package or '(unknown)'}")
    elif args.command == "generate":
        if args.model_package:
            config.generation.model_package = args.model_package
        if args.skip:
            config.generation.skip = True
        try:
            plan = pipeline.execute(config)
        except (ClassResolutionError, SpecificationError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        except ExternalToolFailure as exc:
            parser.exit(1, f"restgen generate failed: {exc}\nRun with --verbose for more details.\n")
        if plan is None:
            print("Skipped")
        else:
            print(f"Using Rest component: {plan.component}")
            if plan.models_generated:
                print(f"Model classes generated into {config.generation.model_output}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
