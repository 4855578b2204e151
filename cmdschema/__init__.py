"""Command schema registry and invocation resolver."""

from .errors import (
    CmdSchemaError,
    DanglingAgentReferenceError,
    DuplicateCommandError,
    DuplicateOptionError,
    InvalidChoiceError,
    InvalidSchemaError,
    InvocationError,
    LoadError,
    ManifestMismatchError,
    MissingArgumentError,
    RegistryFrozenError,
    RegistryNotReadyError,
    RegistryValidationError,
    SchemaErrorKind,
    TokenizeError,
    TypeCoercionError,
    UnexpectedArgumentError,
    UnknownCommandError,
    UnknownOptionError,
)
from .parser import parse_schema
from .registry import CommandRegistry, RegistryHandle
from .render import format_usage, render_commands_section
from .resolver import Resolution, Resolver
from .tokenizer import parse_command_line
from .types import (
    UNSET,
    ArgumentKind,
    ArgumentSpec,
    ArgumentType,
    CommandSchema,
    InvocationContext,
    RawInvocation,
)

__all__ = [
    "UNSET",
    "ArgumentKind",
    "ArgumentSpec",
    "ArgumentType",
    "CmdSchemaError",
    "CommandRegistry",
    "CommandSchema",
    "DanglingAgentReferenceError",
    "DuplicateCommandError",
    "DuplicateOptionError",
    "InvalidChoiceError",
    "InvalidSchemaError",
    "InvocationContext",
    "InvocationError",
    "LoadError",
    "ManifestMismatchError",
    "MissingArgumentError",
    "RawInvocation",
    "RegistryFrozenError",
    "RegistryHandle",
    "RegistryNotReadyError",
    "RegistryValidationError",
    "Resolution",
    "Resolver",
    "SchemaErrorKind",
    "TokenizeError",
    "TypeCoercionError",
    "UnexpectedArgumentError",
    "UnknownCommandError",
    "UnknownOptionError",
    "format_usage",
    "parse_command_line",
    "parse_schema",
    "render_commands_section",
]
