"""Pluggable destination strategies and their loader."""

from __future__ import annotations

from .base import DefaultDestinationGenerator, DestinationGenerator
from .loader import (
    ClassNotCompatibleError,
    ClassNotConstructibleError,
    ClassNotResolvableError,
    ClassResolutionError,
    StrategyLoader,
    available_strategies,
)

__all__ = [
    "ClassNotCompatibleError",
    "ClassNotConstructibleError",
    "ClassNotResolvableError",
    "ClassResolutionError",
    "DefaultDestinationGenerator",
    "DestinationGenerator",
    "StrategyLoader",
    "available_strategies",
]
