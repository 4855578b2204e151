"""In-memory command registry with agent cross-reference validation."""

from __future__ import annotations

from typing import Iterable, Iterator

from .errors import (
    DanglingAgentReferenceError,
    DuplicateCommandError,
    RegistryFrozenError,
    RegistryNotReadyError,
    RegistryValidationError,
    UnknownCommandError,
)
from .types import CommandSchema


class CommandRegistry:
    """Index of ``CommandSchema`` objects.

    A registry accepts registrations until ``finalize_and_validate`` succeeds.
    From then on it is read-only, which makes concurrent lookups safe without
    locking. A registry that failed validation is never usable for resolution.
    """

    def __init__(self, schemas: Iterable[CommandSchema] = ()) -> None:
        self._schemas: dict[str, CommandSchema] = {}
        self._known_agents: frozenset[str] = frozenset()
        self._finalized = False
        for schema in schemas:
            self.register(schema)

    def register(self, schema: CommandSchema) -> None:
        if self._finalized:
            raise RegistryFrozenError(schema.name)
        if schema.name in self._schemas:
            raise DuplicateCommandError(schema.name)
        self._schemas[schema.name] = schema

    def finalize_and_validate(
        self, known_agents: Iterable[str]
    ) -> list[DanglingAgentReferenceError]:
        """Check every agent reference and freeze the registry if all resolve.

        All dangling references across all commands are collected rather than
        stopping at the first one. The result is sorted by ``(command, agent)``
        so it does not depend on registration order.

        Returns:
            The dangling references; empty when the registry is now usable.
        """
        agents = frozenset(known_agents)
        errors = {
            DanglingAgentReferenceError(schema.name, agent)
            for schema in self._schemas.values()
            for agent in schema.agent_refs
            if agent not in agents
        }
        if errors:
            return sorted(errors, key=lambda err: err.key)

        self._known_agents = agents
        self._finalized = True
        return []

    def validate_or_raise(self, known_agents: Iterable[str]) -> None:
        errors = self.finalize_and_validate(known_agents)
        if errors:
            raise RegistryValidationError(errors)

    def lookup(self, name: str) -> CommandSchema:
        try:
            return self._schemas[name]
        except KeyError:
            raise UnknownCommandError(name) from None

    def ensure_ready(self) -> None:
        if not self._finalized:
            raise RegistryNotReadyError()

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def known_agents(self) -> frozenset[str]:
        return self._known_agents

    def names(self) -> list[str]:
        return sorted(self._schemas)

    def schemas(self) -> list[CommandSchema]:
        return [self._schemas[name] for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[CommandSchema]:
        return iter(self.schemas())


class RegistryHandle:
    """Holds the live registry snapshot for hosts that reload schemas.

    A reload builds and validates a fresh ``CommandRegistry`` and passes it to
    ``swap``; readers pick up ``current`` once per resolution and never see a
    half-built registry.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        registry.ensure_ready()
        self._current = registry

    @property
    def current(self) -> CommandRegistry:
        return self._current

    def swap(self, registry: CommandRegistry) -> CommandRegistry:
        """Replace the live snapshot and return the previous one."""
        registry.ensure_ready()
        previous, self._current = self._current, registry
        return previous
