"""Render command schemas as usage lines and a prompt-ready Markdown section."""

from __future__ import annotations

from typing import Iterable

from .types import ArgumentSpec, ArgumentType, CommandSchema


def format_value_hint(spec: ArgumentSpec) -> str:
    if spec.type is ArgumentType.CHOICE:
        return "|".join(sorted(spec.choices))
    if spec.type is ArgumentType.BOOLEAN:
        return "true|false"
    if spec.type is ArgumentType.INTEGER:
        return "int"
    return spec.name


def format_argument(spec: ArgumentSpec) -> str:
    if spec.is_positional:
        text = f"<{format_value_hint(spec)}>"
        if spec.variadic:
            text += "..."
    else:
        text = f"{spec.flag} <{format_value_hint(spec)}>"
    return text if spec.required else f"[{text}]"


def format_usage(schema: CommandSchema, prefix: str = "/") -> str:
    """Build a one-line usage string, e.g. ``/build <ios|android> [--release <true|false>]``."""
    parts = [f"{prefix}{schema.name}"]
    parts.extend(format_argument(arg) for arg in schema.positionals)
    parts.extend(format_argument(arg) for arg in schema.options)
    return " ".join(parts)


def describe_argument(spec: ArgumentSpec) -> str:
    label = spec.name if spec.is_positional else spec.flag
    details = [spec.type.value, "required" if spec.required else "optional"]
    if spec.has_default:
        default = str(spec.default).lower() if isinstance(spec.default, bool) else spec.default
        details.append(f"default: {default}")
    line = f"`{label}` ({', '.join(details)})"
    if spec.description:
        line += f": {spec.description}"
    return line


def render_commands_section(schemas: Iterable[CommandSchema], prefix: str = "/") -> str | None:
    """Render available commands as a Markdown section.

    Args:
        schemas: Command schemas to list.
        prefix: Invocation prefix shown in usage lines.

    Returns:
        Markdown text, or None when there are no commands.
    """
    ordered = sorted(schemas, key=lambda s: s.name)
    if not ordered:
        return None

    lines: list[str] = ["## Commands", "### Available commands"]
    for schema in ordered:
        summary = f": {schema.description}" if schema.description else ""
        lines.append(f"- `{format_usage(schema, prefix)}`{summary}")
        for arg in schema.arguments:
            lines.append(f"  - {describe_argument(arg)}")
        if schema.agent_refs:
            lines.append(f"  - agents: {', '.join(sorted(schema.agent_refs))}")

    return "\n".join(lines)
