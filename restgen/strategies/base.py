"""Destination strategy contract and the built-in implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from string import Template

from ..models import OperationContext


class DestinationGenerator(ABC):
    """Contract for strategies that map a generated route to its destination."""

    @abstractmethod
    def generate_destination_for(self, operation: OperationContext) -> str:
        """Return the endpoint URI the route for ``operation`` should send to."""


class DefaultDestinationGenerator(DestinationGenerator):
    """Routes every operation to ``direct:<operationId>``.

    ``syntax`` accepts ``${operationId}``, ``${method}`` and ``${path}``.
    """

    DEFAULT_SYNTAX = "direct:${operationId}"

    def __init__(self, syntax: str | None = None) -> None:
        self.syntax = syntax or self.DEFAULT_SYNTAX

    def generate_destination_for(self, operation: OperationContext) -> str:
        return Template(self.syntax).safe_substitute(
            operationId=operation.operation_id,
            method=operation.method.lower(),
            path=operation.path,
        )
