"""Turn declarative command descriptions into validated ``CommandSchema`` objects."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Mapping

from .coercion import coerce_value, matches_type
from .errors import InvalidSchemaError, InvocationError, SchemaErrorKind
from .types import UNSET, ArgumentKind, ArgumentSpec, ArgumentType, CommandSchema

COMMAND_NAME_RE = re.compile(r"^[a-z][a-z0-9-]*$")

_TYPE_ALIASES = {
    "string": ArgumentType.STRING,
    "str": ArgumentType.STRING,
    "boolean": ArgumentType.BOOLEAN,
    "bool": ArgumentType.BOOLEAN,
    "integer": ArgumentType.INTEGER,
    "int": ArgumentType.INTEGER,
    "choice": ArgumentType.CHOICE,
    "enum": ArgumentType.CHOICE,
}

_KIND_ALIASES = {
    "positional": ArgumentKind.POSITIONAL,
    "argument": ArgumentKind.POSITIONAL,
    "option": ArgumentKind.OPTION,
    "flag": ArgumentKind.OPTION,
}


def parse_schema(declaration: Mapping[str, Any], source: Path | None = None) -> CommandSchema:
    """Validate a raw declaration and build a frozen ``CommandSchema``.

    Rules run in a fixed order and the first failure wins: command name,
    duplicate argument names, missing choices, default type, positional order,
    variadic placement. Shape problems (wrong container types, unknown type
    names) are reported as ``MALFORMED`` once the name has been checked.

    Args:
        declaration: Mapping with ``name``, ``arguments``, optional ``options``,
            ``agents`` and ``description``.
        source: Optional file the declaration came from; not part of equality.

    Raises:
        InvalidSchemaError: Describing the first rule that failed.
    """
    if not isinstance(declaration, Mapping):
        raise InvalidSchemaError(SchemaErrorKind.MALFORMED, "declaration must be a mapping")

    name = declaration.get("name")
    if not isinstance(name, str) or not COMMAND_NAME_RE.match(name):
        raise InvalidSchemaError(
            SchemaErrorKind.BAD_NAME,
            f"name {name!r} must match {COMMAND_NAME_RE.pattern}",
            command=name if isinstance(name, str) else None,
        )

    entries = _collect_entries(name, declaration)
    agents = _collect_agents(name, declaration.get("agents"))

    _check_unique_names(name, entries)
    _check_choices(name, entries)
    defaults = [_check_default(name, entry) for entry in entries]
    _check_positional_order(name, entries)
    _check_variadic(name, entries)

    arguments = tuple(
        ArgumentSpec(
            name=entry["name"],
            kind=entry["kind"],
            type=entry["type"],
            required=entry["required"],
            choices=entry["choices"],
            default=default,
            description=entry["description"],
            variadic=entry["variadic"],
        )
        for entry, default in zip(entries, defaults)
    )

    description = declaration.get("description") or ""
    return CommandSchema(
        name=name,
        arguments=arguments,
        agent_refs=frozenset(agents),
        description=str(description).strip(),
        source=source,
    )


def _malformed(command: str, detail: str, argument: str | None = None) -> InvalidSchemaError:
    return InvalidSchemaError(SchemaErrorKind.MALFORMED, detail, command=command, argument=argument)


def _collect_entries(command: str, declaration: Mapping[str, Any]) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    for section, forced_kind in (("arguments", None), ("options", ArgumentKind.OPTION)):
        raw_list = declaration.get(section)
        if raw_list is None:
            continue
        if not isinstance(raw_list, list):
            raise _malformed(command, f"'{section}' must be a list")
        for raw in raw_list:
            entries.append(_normalize_entry(command, raw, forced_kind))
    return entries


def _normalize_entry(
    command: str, raw: Any, forced_kind: ArgumentKind | None
) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise _malformed(command, "each argument must be a mapping")

    arg_name = raw.get("name")
    if not isinstance(arg_name, str) or not arg_name.strip():
        raise _malformed(command, "argument is missing a string 'name'")
    arg_name = arg_name.strip()

    choices_raw = raw.get("choices")
    if choices_raw is None:
        choices: frozenset[str] = frozenset()
    elif isinstance(choices_raw, list) and all(isinstance(c, str) for c in choices_raw):
        choices = frozenset(choices_raw)
    else:
        raise _malformed(command, "'choices' must be a list of strings", arg_name)

    type_raw = raw.get("type")
    if type_raw is None:
        arg_type = ArgumentType.CHOICE if choices else ArgumentType.STRING
    else:
        arg_type = _TYPE_ALIASES.get(str(type_raw).strip().lower())
        if arg_type is None:
            raise _malformed(command, f"unknown type {type_raw!r}", arg_name)

    if forced_kind is not None:
        kind = forced_kind
    elif raw.get("positional") is True:
        kind = ArgumentKind.POSITIONAL
    else:
        kind = _KIND_ALIASES.get(str(raw.get("kind", "option")).strip().lower())
        if kind is None:
            raise _malformed(command, f"unknown kind {raw.get('kind')!r}", arg_name)

    required = raw.get("required", False)
    variadic = raw.get("variadic", False)
    if not isinstance(required, bool) or not isinstance(variadic, bool):
        raise _malformed(command, "'required' and 'variadic' must be booleans", arg_name)

    return {
        "name": arg_name,
        "kind": kind,
        "type": arg_type,
        "required": required,
        "choices": choices,
        "default": raw.get("default", UNSET),
        "description": str(raw.get("description") or "").strip(),
        "variadic": variadic,
    }


def _collect_agents(command: str, raw: Any) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(a, str) for a in raw):
        raise _malformed(command, "'agents' must be a list of strings")
    return [a.strip() for a in raw if a.strip()]


def _check_unique_names(command: str, entries: list[dict[str, Any]]) -> None:
    seen: set[str] = set()
    for entry in entries:
        if entry["name"] in seen:
            raise InvalidSchemaError(
                SchemaErrorKind.DUPLICATE_ARGUMENT,
                "argument names must be unique",
                command=command,
                argument=entry["name"],
            )
        seen.add(entry["name"])


def _check_choices(command: str, entries: list[dict[str, Any]]) -> None:
    for entry in entries:
        if entry["type"] is ArgumentType.CHOICE and not entry["choices"]:
            raise InvalidSchemaError(
                SchemaErrorKind.MISSING_CHOICES,
                "choice arguments need a non-empty 'choices' list",
                command=command,
                argument=entry["name"],
            )


def _check_default(command: str, entry: dict[str, Any]) -> Any:
    default = entry["default"]
    # YAML "default: null" means no default
    if default is UNSET or default is None:
        return UNSET

    arg_type: ArgumentType = entry["type"]
    if matches_type(default, arg_type, entry["choices"]):
        return default
    if isinstance(default, str) and arg_type in (ArgumentType.BOOLEAN, ArgumentType.INTEGER):
        try:
            return coerce_value(entry["name"], arg_type, default)
        except InvocationError:
            pass

    raise InvalidSchemaError(
        SchemaErrorKind.DEFAULT_TYPE_MISMATCH,
        f"default {default!r} is not a valid {arg_type.value}",
        command=command,
        argument=entry["name"],
    )


def _check_positional_order(command: str, entries: list[dict[str, Any]]) -> None:
    seen_optional = False
    for entry in entries:
        if entry["kind"] is not ArgumentKind.POSITIONAL:
            continue
        if not entry["required"]:
            seen_optional = True
        elif seen_optional:
            raise InvalidSchemaError(
                SchemaErrorKind.POSITIONAL_ORDER,
                "required positional arguments must precede optional ones",
                command=command,
                argument=entry["name"],
            )


def _check_variadic(command: str, entries: list[dict[str, Any]]) -> None:
    positionals = [e for e in entries if e["kind"] is ArgumentKind.POSITIONAL]
    for entry in entries:
        if not entry["variadic"]:
            continue
        if entry["kind"] is not ArgumentKind.POSITIONAL:
            detail = "only positional arguments can be variadic"
        elif entry is not positionals[-1]:
            detail = "a variadic argument must be the last positional"
        elif entry["default"] not in (UNSET, None):
            detail = "a variadic argument cannot declare a default"
        else:
            continue
        raise InvalidSchemaError(
            SchemaErrorKind.VARIADIC_POSITION, detail, command=command, argument=entry["name"]
        )
