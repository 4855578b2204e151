"""Tests for usage and Markdown rendering."""

from cmdschema import parse_schema, render_commands_section
from cmdschema.render import describe_argument, format_usage


def test_format_usage_options(declarations) -> None:
    schema = parse_schema(declarations["build"])
    assert format_usage(schema) == (
        "/build --platform <android|ios> [--release <true|false>] [--flavor <flavor>]"
    )


def test_format_usage_positionals_and_variadic() -> None:
    schema = parse_schema(
        {
            "name": "lint",
            "arguments": [
                {"name": "rule", "kind": "positional", "required": True},
                {"name": "paths", "kind": "positional", "variadic": True},
                {"name": "max", "type": "integer"},
            ],
        }
    )
    assert format_usage(schema, prefix="!") == "!lint <rule> [<paths>...] [--max <int>]"


def test_describe_argument(declarations) -> None:
    schema = parse_schema(declarations["add-backend"])
    assert describe_argument(schema.get_argument("retries")) == (
        "`--retries` (integer, optional, default: 3)"
    )
    release = parse_schema(declarations["build"]).get_argument("release")
    assert "default: false" in describe_argument(release)


def test_render_commands_section_empty() -> None:
    assert render_commands_section([]) is None


def test_render_commands_section_sorted(declarations) -> None:
    schemas = [parse_schema(declarations[name]) for name in ("build", "add-backend")]
    section = render_commands_section(schemas)

    assert section is not None
    assert section.startswith("## Commands")
    assert "- `/build --platform <android|ios>" in section
    assert ": Build the app for a platform." in section
    assert "  - agents: flutter-builder" in section
    assert section.find("/add-backend") < section.find("/build")
