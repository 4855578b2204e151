"""Raw string to typed value conversion shared by the parser and the resolver."""

from __future__ import annotations

import re
from typing import Any, Iterable

from .errors import InvalidChoiceError, TypeCoercionError
from .types import ArgumentType

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_BOOLEANS = {"true": True, "false": False}
_EXPECTED = {
    ArgumentType.STRING: "a string",
    ArgumentType.BOOLEAN: "a boolean (true/false)",
    ArgumentType.INTEGER: "a base-10 integer",
}


def coerce_boolean(argument: str, raw: str) -> bool:
    try:
        return _BOOLEANS[raw.lower()]
    except KeyError:
        raise TypeCoercionError(argument, raw, _EXPECTED[ArgumentType.BOOLEAN]) from None


def coerce_integer(argument: str, raw: str) -> int:
    # int() alone would also accept whitespace and digit separators
    if not _INTEGER_RE.match(raw):
        raise TypeCoercionError(argument, raw, _EXPECTED[ArgumentType.INTEGER])
    return int(raw, 10)


def coerce_choice(argument: str, raw: str, choices: Iterable[str]) -> str:
    allowed = frozenset(choices)
    if raw not in allowed:
        raise InvalidChoiceError(raw, allowed, argument=argument)
    return raw


def coerce_value(
    argument: str,
    arg_type: ArgumentType,
    raw: Any,
    choices: Iterable[str] = (),
) -> Any:
    """Convert one raw token to ``arg_type``.

    Only strings are accepted; a native value such as ``5`` or ``None`` is
    rejected rather than passed through.

    Raises:
        TypeCoercionError: For non-string input and malformed booleans and integers.
        InvalidChoiceError: When a choice value is not one of ``choices``.
    """
    if not isinstance(raw, str):
        if arg_type is ArgumentType.CHOICE:
            raise InvalidChoiceError(raw, choices, argument=argument)
        raise TypeCoercionError(argument, raw, _EXPECTED[arg_type])
    if arg_type is ArgumentType.BOOLEAN:
        return coerce_boolean(argument, raw)
    if arg_type is ArgumentType.INTEGER:
        return coerce_integer(argument, raw)
    if arg_type is ArgumentType.CHOICE:
        return coerce_choice(argument, raw, choices)
    return raw


def matches_type(value: Any, arg_type: ArgumentType, choices: Iterable[str] = ()) -> bool:
    """Check an already-typed value (e.g. a YAML default) against ``arg_type``."""
    if arg_type is ArgumentType.BOOLEAN:
        return isinstance(value, bool)
    if arg_type is ArgumentType.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if arg_type is ArgumentType.CHOICE:
        return isinstance(value, str) and value in frozenset(choices)
    return isinstance(value, str)
