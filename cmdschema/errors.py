"""Typed errors for schema loading and invocation resolution."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable


class CmdSchemaError(Exception):
    """Base class for every error raised by cmdschema."""

    code = "cmdschema_error"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class LoadError(CmdSchemaError):
    """Raised while building a registry. Fatal to registry construction."""

    code = "load_error"


class InvocationError(CmdSchemaError):
    """Raised while resolving a single invocation."""

    code = "invocation_error"


# -- load time --------------------------------------------------------------


class SchemaErrorKind(str, Enum):
    BAD_NAME = "bad_name"
    DUPLICATE_ARGUMENT = "duplicate_argument"
    MISSING_CHOICES = "missing_choices"
    DEFAULT_TYPE_MISMATCH = "default_type_mismatch"
    POSITIONAL_ORDER = "positional_order"
    VARIADIC_POSITION = "variadic_position"
    MALFORMED = "malformed"


class InvalidSchemaError(LoadError):
    code = "invalid_schema"

    def __init__(
        self,
        kind: SchemaErrorKind,
        detail: str,
        command: str | None = None,
        argument: str | None = None,
    ):
        self.kind = kind
        self.detail = detail
        self.command = command
        self.argument = argument
        where = f"command '{command}'" if command else "command declaration"
        if argument:
            where += f", argument '{argument}'"
        super().__init__(f"Invalid schema ({kind.value}) in {where}: {detail}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(kind=self.kind.value, command=self.command, argument=self.argument)
        return data


class DuplicateCommandError(LoadError):
    code = "duplicate_command"

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Command '{command}' is already registered")


class DanglingAgentReferenceError(LoadError):
    """A command references an agent that is not known to the registry.

    Instances compare and hash by ``(command, agent)`` so collected errors can be
    treated as a set.
    """

    code = "dangling_agent_reference"

    def __init__(self, command: str, agent: str):
        self.command = command
        self.agent = agent
        super().__init__(f"Command '{command}' references unknown agent '{agent}'")

    @property
    def key(self) -> tuple[str, str]:
        return (self.command, self.agent)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DanglingAgentReferenceError):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(command=self.command, agent=self.agent)
        return data


class ManifestMismatchError(LoadError):
    code = "manifest_mismatch"

    def __init__(self, section: str, detail: str):
        self.section = section
        self.detail = detail
        super().__init__(f"Plugin manifest '{section}' does not match files on disk: {detail}")


class RegistryValidationError(LoadError):
    """Aggregate of every load-time error found in a validation pass."""

    code = "registry_validation"

    def __init__(self, errors: Iterable[LoadError]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} load error(s):"]
        lines.extend(f"  - {err}" for err in self.errors)
        super().__init__("\n".join(lines))

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": f"{len(self.errors)} load error(s)",
            "errors": [err.to_dict() for err in self.errors],
        }


class RegistryFrozenError(LoadError):
    code = "registry_frozen"

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Cannot register '{command}': registry is already finalized")


class RegistryNotReadyError(LoadError):
    code = "registry_not_ready"

    def __init__(self) -> None:
        super().__init__("Registry has not passed finalize_and_validate; refusing to resolve")


# -- invocation time --------------------------------------------------------


class UnknownCommandError(InvocationError):
    code = "unknown_command"

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Unknown command '{command}'")


class MissingArgumentError(InvocationError):
    code = "missing_argument"

    def __init__(self, argument: str, command: str | None = None):
        self.argument = argument
        self.command = command
        suffix = f" for command '{command}'" if command else ""
        super().__init__(f"Missing required argument '{argument}'{suffix}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(argument=self.argument, command=self.command)
        return data


class UnknownOptionError(InvocationError):
    code = "unknown_option"

    def __init__(self, flag: str, command: str | None = None):
        self.flag = flag
        self.command = command
        suffix = f" for command '{command}'" if command else ""
        super().__init__(f"Unknown option '--{flag}'{suffix}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(flag=self.flag, command=self.command)
        return data


class TypeCoercionError(InvocationError):
    code = "type_coercion"

    def __init__(self, argument: str, value: Any, expected: str):
        self.argument = argument
        self.value = value
        self.expected = expected
        super().__init__(f"Argument '{argument}' expects {expected}, got {value!r}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(argument=self.argument, value=self.value, expected=self.expected)
        return data


class InvalidChoiceError(InvocationError):
    code = "invalid_choice"

    def __init__(self, value: Any, allowed: Iterable[str], argument: str | None = None):
        self.value = value
        self.allowed = frozenset(allowed)
        self.argument = argument
        options = ", ".join(sorted(self.allowed))
        target = f" for '{argument}'" if argument else ""
        super().__init__(f"Invalid choice {value!r}{target} (allowed: {options})")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(value=self.value, allowed=sorted(self.allowed), argument=self.argument)
        return data


class UnexpectedArgumentError(InvocationError):
    code = "unexpected_argument"

    def __init__(self, value: str, command: str | None = None):
        self.value = value
        self.command = command
        suffix = f" for command '{command}'" if command else ""
        super().__init__(f"Unexpected positional argument {value!r}{suffix}")


class DuplicateOptionError(InvocationError):
    code = "duplicate_option"

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"Option '--{flag}' given more than once")


class TokenizeError(InvocationError):
    code = "tokenize_error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Could not parse command line: {detail}")
