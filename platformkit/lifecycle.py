"""Ordered initialisation, start and stop of application dependencies."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from platformkit.errors import AppError, ErrorList

ERR_DEPENDENCY_INIT_CHAIN_IS_REQUIRED = AppError(
    "SYS", "Chain with dependencies is required"
)


class DependencyService(Protocol):
    """A dependency that can be initialised, started and stopped."""

    def init(self) -> None:
        """Prepare the dependency; raise on failure."""

    def start(self) -> None:
        """Start the dependency; raise on failure."""

    def stop(self) -> None:
        """Stop the dependency; raise on failure."""


class DependenciesInitializer:
    """Runs each lifecycle step over a chain of dependencies in order.

    The first failing dependency stops the step and its exception propagates.
    """

    def __init__(self, chain: Iterable[DependencyService]) -> None:
        self._chain = list(chain)

    def init_dependencies(self) -> None:
        for dependency in self._chain:
            dependency.init()

    def start_dependencies(self) -> None:
        for dependency in self._chain:
            dependency.start()

    def stop_dependencies(self) -> None:
        for dependency in self._chain:
            dependency.stop()


class DependenciesInitializerBuilder:
    """Collects the dependency chain and builds a :class:`DependenciesInitializer`."""

    def __init__(self) -> None:
        self._chain: list[DependencyService] | None = None

    def dependency_init_chain(
        self, chain: Iterable[DependencyService] | None
    ) -> DependenciesInitializerBuilder:
        self._chain = None if chain is None else list(chain)
        return self

    def build(self) -> DependenciesInitializer:
        """Build the initializer; raise ErrorList if required fields are missing."""
        errors = ErrorList()
        if self._chain is None:
            errors.add_error(ERR_DEPENDENCY_INIT_CHAIN_IS_REQUIRED)
        if errors.is_present():
            raise errors
        return DependenciesInitializer(self._chain)