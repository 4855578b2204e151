"""Split a typed command line into a ``RawInvocation``."""

from __future__ import annotations

import shlex

from .errors import DuplicateOptionError, TokenizeError
from .types import RawInvocation

DUPLICATE_POLICIES = ("last", "first", "reject")


def parse_command_line(
    text: str,
    prefix: str = "/",
    duplicate_policy: str = "last",
) -> RawInvocation:
    """Tokenize ``text`` such as ``/build ios --release true``.

    ``--flag value`` and ``--flag=value`` both set an option. A flag directly
    followed by another flag, or by the end of the line, gets the value
    ``"true"``. Everything after a bare ``--`` is positional. Repeated flags
    follow ``duplicate_policy``: ``last`` wins, ``first`` wins or ``reject``.

    Raises:
        TokenizeError: On unbalanced quotes or a missing command name.
        DuplicateOptionError: When a flag repeats under the ``reject`` policy.
    """
    if duplicate_policy not in DUPLICATE_POLICIES:
        raise ValueError(f"Unknown duplicate option policy: {duplicate_policy!r}")

    try:
        tokens = shlex.split(text)
    except ValueError as e:
        raise TokenizeError(str(e)) from e

    if not tokens:
        raise TokenizeError("empty input")

    command = tokens[0]
    if prefix and command.startswith(prefix):
        command = command[len(prefix) :]
    if not command:
        raise TokenizeError("missing command name")

    positionals: list[str] = []
    options: dict[str, str] = {}
    rest = tokens[1:]
    i = 0
    while i < len(rest):
        token = rest[i]
        i += 1
        if token == "--":
            positionals.extend(rest[i:])
            break
        if not token.startswith("--"):
            positionals.append(token)
            continue

        flag, sep, value = token[2:].partition("=")
        if not sep:
            if i < len(rest) and not rest[i].startswith("--"):
                value = rest[i]
                i += 1
            else:
                value = "true"

        merge_option(options, flag, value, duplicate_policy)

    return RawInvocation(command=command, positionals=tuple(positionals), options=options)


def merge_option(options: dict[str, str], flag: str, value: str, policy: str) -> None:
    """Store ``value`` under ``flag`` unless ``policy`` says an earlier value stays.

    Raises:
        DuplicateOptionError: When ``flag`` is already set under ``reject``.
    """
    if flag in options:
        if policy == "reject":
            raise DuplicateOptionError(flag)
        if policy == "first":
            return
    options[flag] = value
