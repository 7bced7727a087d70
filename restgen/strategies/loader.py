"""Resolution of destination strategies by registered name or dotted path."""

from __future__ import annotations

import importlib
import sys
from contextlib import contextmanager
from importlib import metadata
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Mapping
from urllib.parse import urlparse
from urllib.request import url2pathname

from ..logging import get_logger
from .base import DefaultDestinationGenerator, DestinationGenerator

_ENTRY_POINT_GROUP = "restgen.destinations"

_BUILTIN_FACTORIES: Dict[str, Callable[[], DestinationGenerator]] = {
    "default": DefaultDestinationGenerator,
}

_CONTRACT = f"{DestinationGenerator.__module__}.{DestinationGenerator.__qualname__}"

logger = get_logger("strategies")


class ClassResolutionError(RuntimeError):
    """Raised when a destination strategy cannot be turned into an instance."""

    def __init__(self, class_name: str, message: str) -> None:
        super().__init__(message)
        self.class_name = class_name


class ClassNotResolvableError(ClassResolutionError):
    def __init__(self, class_name: str, detail: str | None = None) -> None:
        message = (
            f"The given destinationGenerator class ({class_name}) cannot be loaded, make sure "
            "that it is present in the project output directory or importable from the "
            "current environment"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(class_name, message)


class ClassNotCompatibleError(ClassResolutionError):
    def __init__(self, class_name: str) -> None:
        super().__init__(
            class_name,
            f"The given destinationGenerator class ({class_name}) does not implement "
            f"{_CONTRACT} interface.",
        )


class ClassNotConstructibleError(ClassResolutionError):
    def __init__(self, class_name: str, detail: str | None = None) -> None:
        message = (
            f"The given destinationGenerator class ({class_name}) cannot be instantiated, "
            "make sure that it is concrete, accepts no constructor arguments and that all "
            "of its imports are available"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(class_name, message)


def available_strategies() -> Dict[str, object]:
    """Return registered strategies: built-ins first, then installed entry points."""
    registry: Dict[str, object] = dict(_BUILTIN_FACTORIES)
    for entry in _iter_entry_points():
        registry.setdefault(entry.name, entry)
    return registry


class StrategyLoader:
    """Resolves, validates and instantiates a :class:`DestinationGenerator`.

    Nothing is cached: each :meth:`load` call re-imports the target so a
    rebuilt project output directory is always picked up.
    """

    def __init__(self, registry: Mapping[str, object] | None = None) -> None:
        self._registry = dict(registry) if registry is not None else None

    def load(
        self, class_name: str, extra_root: Path | str | None = None
    ) -> DestinationGenerator:
        registry = self._registry if self._registry is not None else available_strategies()
        with layered_import_path(extra_root):
            if class_name in registry:
                target = _load_registered(class_name, registry[class_name])
            else:
                target = _resolve_dotted(class_name)

            if not isinstance(target, type) or not issubclass(target, DestinationGenerator):
                raise ClassNotCompatibleError(class_name)

            try:
                instance = target()
            except Exception as exc:
                raise ClassNotConstructibleError(class_name, str(exc)) from exc

        logger.debug("Loaded destination strategy %s", class_name)
        return instance


@contextmanager
def layered_import_path(extra_root: Path | str | None) -> Iterator[None]:
    """Make ``extra_root`` importable for the duration of the block.

    The root is appended, so modules already reachable from the ambient path
    take precedence. A root already on the path stays where it is. On exit
    ``sys.path`` is restored exactly and every module imported from the root
    is evicted.
    """
    if extra_root is None:
        yield
        return

    root = _as_directory(extra_root)
    entry = str(root)
    before = set(sys.modules)
    appended = entry not in sys.path
    if appended:
        sys.path.append(entry)
    importlib.invalidate_caches()
    try:
        yield
    finally:
        if appended:
            _discard_last(sys.path, entry)
            sys.path_importer_cache.pop(entry, None)
        for name in set(sys.modules) - before:
            if _loaded_from(sys.modules.get(name), root):
                del sys.modules[name]
        importlib.invalidate_caches()


def _discard_last(paths: List[str], entry: str) -> None:
    for index in range(len(paths) - 1, -1, -1):
        if paths[index] == entry:
            del paths[index]
            return


def _as_directory(location: Path | str) -> Path:
    if isinstance(location, Path):
        return location.resolve()
    parsed = urlparse(location)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path)).resolve()
    if parsed.scheme and len(parsed.scheme) > 1:
        raise ValueError(f"Unsupported classpath root '{location}'; expected a local directory")
    return Path(location).resolve()


def _loaded_from(module: object, root: Path) -> bool:
    origin = getattr(module, "__file__", None)
    if not origin:
        return False
    try:
        Path(origin).resolve().relative_to(root)
    except ValueError:
        return False
    return True


def _load_registered(class_name: str, entry: object) -> object:
    if isinstance(entry, metadata.EntryPoint):
        try:
            return entry.load()
        except Exception as exc:
            raise ClassNotResolvableError(class_name, str(exc)) from exc
    return entry


def _resolve_dotted(class_name: str) -> object:
    if ":" in class_name:
        module_name, _, attribute = class_name.partition(":")
    else:
        module_name, _, attribute = class_name.rpartition(".")
    if not module_name or not attribute:
        raise ClassNotResolvableError(class_name, "expected a fully qualified name")

    try:
        module = importlib.import_module(module_name)
    except Exception as exc:
        raise ClassNotResolvableError(class_name, str(exc)) from exc

    target: object = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ClassNotResolvableError(class_name, str(exc)) from exc
    return target


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover - broken installation metadata
        return []
    return entry_points.select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "ClassNotCompatibleError",
    "ClassNotConstructibleError",
    "ClassNotResolvableError",
    "ClassResolutionError",
    "StrategyLoader",
    "available_strategies",
    "layered_import_path",
]
