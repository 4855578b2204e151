"""Bind raw invocations to command schemas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .coercion import coerce_value
from .errors import (
    InvocationError,
    MissingArgumentError,
    UnexpectedArgumentError,
    UnknownOptionError,
)
from .registry import CommandRegistry, RegistryHandle
from .tokenizer import DUPLICATE_POLICIES, merge_option, parse_command_line
from .types import ArgumentSpec, CommandSchema, InvocationContext, RawInvocation


@dataclass(frozen=True)
class Resolution:
    """Outcome of one resolution: exactly one of ``context`` or ``error`` is set."""

    context: InvocationContext | None = None
    error: InvocationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> InvocationContext:
        if self.error is not None:
            raise self.error
        if self.context is None:
            raise ValueError("Resolution carries neither a context nor an error")
        return self.context


class Resolver:
    """Resolve invocations against a validated registry.

    Every invocation-time failure is returned inside a ``Resolution``; nothing
    is applied until all arguments bound and coerced cleanly.
    """

    def __init__(
        self,
        registry: CommandRegistry | RegistryHandle,
        prefix: str = "/",
        duplicate_policy: str = "last",
    ) -> None:
        if isinstance(registry, CommandRegistry):
            registry.ensure_ready()
        if duplicate_policy not in DUPLICATE_POLICIES:
            raise ValueError(f"Unknown duplicate option policy: {duplicate_policy!r}")
        self._registry = registry
        self.prefix = prefix
        self.duplicate_policy = duplicate_policy

    @property
    def registry(self) -> CommandRegistry:
        if isinstance(self._registry, RegistryHandle):
            return self._registry.current
        return self._registry

    def resolve(
        self,
        command: str,
        positionals: Sequence[str] = (),
        options: Mapping[str, str] | None = None,
    ) -> Resolution:
        try:
            context = self._bind(self.registry, command, tuple(positionals), dict(options or {}))
        except InvocationError as e:
            return Resolution(error=e)
        return Resolution(context=context)

    def resolve_raw(self, invocation: RawInvocation) -> Resolution:
        return self.resolve(invocation.command, invocation.positionals, invocation.options)

    def resolve_line(self, text: str) -> Resolution:
        try:
            invocation = parse_command_line(
                text, prefix=self.prefix, duplicate_policy=self.duplicate_policy
            )
        except InvocationError as e:
            return Resolution(error=e)
        return self.resolve_raw(invocation)

    def resolve_or_raise(
        self,
        command: str,
        positionals: Sequence[str] = (),
        options: Mapping[str, str] | None = None,
    ) -> InvocationContext:
        return self.resolve(command, positionals, options).unwrap()

    def _bind(
        self,
        registry: CommandRegistry,
        command: str,
        positionals: tuple[str, ...],
        options: dict[str, str],
    ) -> InvocationContext:
        schema = registry.lookup(command)
        # Caller-supplied values are coerced; defaults were typed by the parser
        supplied: dict[str, Any] = {}
        defaults: dict[str, Any] = {}

        self._bind_positionals(schema, positionals, supplied, defaults)

        flags = self._normalize_flags(options)
        for spec in schema.options:
            if spec.name in flags:
                supplied[spec.name] = flags[spec.name]
            elif spec.has_default:
                defaults[spec.name] = spec.default
            elif spec.required:
                raise MissingArgumentError(spec.name, command=schema.name)

        values: dict[str, Any] = {}
        for spec in schema.arguments:
            if spec.name in supplied:
                values[spec.name] = _coerce(spec, supplied[spec.name])
            elif spec.name in defaults:
                values[spec.name] = defaults[spec.name]

        for flag in flags:
            spec = schema.get_argument(flag)
            if spec is None or spec.is_positional:
                raise UnknownOptionError(flag, command=schema.name)

        return InvocationContext(
            command=schema.name,
            values=values,
            raw_options=options,
            positionals=positionals,
        )

    def _normalize_flags(self, options: Mapping[str, Any]) -> dict[str, Any]:
        """Strip leading dashes; keys that collapse together follow the duplicate policy."""
        flags: dict[str, Any] = {}
        for key, value in options.items():
            merge_option(flags, key.lstrip("-"), value, self.duplicate_policy)
        return flags

    @staticmethod
    def _bind_positionals(
        schema: CommandSchema,
        tokens: tuple[str, ...],
        supplied: dict[str, Any],
        defaults: dict[str, Any],
    ) -> None:
        remaining = list(tokens)
        for spec in schema.positionals:
            if spec.variadic:
                if remaining:
                    supplied[spec.name] = tuple(remaining)
                    remaining = []
                elif spec.required:
                    raise MissingArgumentError(spec.name, command=schema.name)
                continue
            if remaining:
                supplied[spec.name] = remaining.pop(0)
            elif spec.required:
                raise MissingArgumentError(spec.name, command=schema.name)
            elif spec.has_default:
                defaults[spec.name] = spec.default

        if remaining:
            raise UnexpectedArgumentError(remaining[0], command=schema.name)


def _coerce(spec: ArgumentSpec, raw: Any) -> Any:
    if spec.variadic:
        return tuple(coerce_value(spec.name, spec.type, item, spec.choices) for item in raw)
    return coerce_value(spec.name, spec.type, raw, spec.choices)
