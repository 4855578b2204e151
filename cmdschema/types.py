"""Data models for command schemas and resolved invocations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping


class _Unset:
    """Marker for an optional argument that was neither provided nor defaulted."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"

    def __reduce__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class ArgumentKind(str, Enum):
    POSITIONAL = "positional"
    OPTION = "option"


class ArgumentType(str, Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    CHOICE = "choice"

    @property
    def python_type(self) -> type:
        return {
            ArgumentType.STRING: str,
            ArgumentType.BOOLEAN: bool,
            ArgumentType.INTEGER: int,
            ArgumentType.CHOICE: str,
        }[self]


@dataclass(frozen=True)
class ArgumentSpec:
    name: str
    kind: ArgumentKind = ArgumentKind.OPTION
    type: ArgumentType = ArgumentType.STRING
    required: bool = False
    choices: frozenset[str] = frozenset()
    default: Any = UNSET
    description: str = ""
    variadic: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not UNSET

    @property
    def is_positional(self) -> bool:
        return self.kind is ArgumentKind.POSITIONAL

    @property
    def flag(self) -> str:
        return f"--{self.name}"


@dataclass(frozen=True)
class CommandSchema:
    name: str
    arguments: tuple[ArgumentSpec, ...] = ()
    agent_refs: frozenset[str] = frozenset()
    description: str = ""
    source: Path | None = field(default=None, compare=False)

    @property
    def positionals(self) -> tuple[ArgumentSpec, ...]:
        return tuple(arg for arg in self.arguments if arg.is_positional)

    @property
    def options(self) -> tuple[ArgumentSpec, ...]:
        return tuple(arg for arg in self.arguments if not arg.is_positional)

    def get_argument(self, name: str) -> ArgumentSpec | None:
        for arg in self.arguments:
            if arg.name == name:
                return arg
        return None


@dataclass(frozen=True)
class RawInvocation:
    """A tokenized, not yet validated invocation."""

    command: str
    positionals: tuple[str, ...] = ()
    options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class InvocationContext:
    """The typed result of resolving one invocation.

    ``values`` only holds arguments that were provided or defaulted. Optional
    arguments without either are absent, so ``is_set`` can tell them apart from
    an explicit falsy value.
    """

    command: str
    values: Mapping[str, Any]
    raw_options: Mapping[str, str]
    positionals: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(self, "raw_options", MappingProxyType(dict(self.raw_options)))

    def __hash__(self) -> int:
        # MappingProxyType is unhashable; hash the frozen item sets instead
        return hash(
            (
                self.command,
                frozenset(self.values.items()),
                frozenset(self.raw_options.items()),
                self.positionals,
            )
        )

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def get(self, name: str) -> Any:
        return self.values.get(name, UNSET)

    def is_set(self, name: str) -> bool:
        return name in self.values

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "values": {
                k: list(v) if isinstance(v, tuple) else v for k, v in self.values.items()
            },
            "raw_options": dict(self.raw_options),
            "positionals": list(self.positionals),
        }
