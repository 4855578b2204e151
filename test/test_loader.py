from pathlib import Path

import pytest

from cmdschema import (
    DanglingAgentReferenceError,
    DuplicateCommandError,
    InvalidSchemaError,
    ManifestMismatchError,
    RegistryValidationError,
    Resolver,
    SchemaErrorKind,
)
from cmdschema.loader import FrontmatterError, load_plugin, split_frontmatter

BUILD_MD = """
name: build
description: Build the app for a platform.
agents: [flutter-builder]
arguments:
  - name: platform
    type: choice
    choices: [ios, android]
    required: true
  - name: release
    type: boolean
    default: false
"""

ADD_BACKEND_MD = """
description: Add a backend integration.
agents:
  - flutter-firebase-core
arguments:
  - name: provider
    kind: positional
    type: choice
    choices: [firebase, supabase]
    required: true
"""


def test_split_frontmatter() -> None:
    data, body = split_frontmatter("---\nname: build\n---\n\nBody text")
    assert data == {"name": "build"}
    assert body.strip() == "Body text"


def test_split_frontmatter_without_fence() -> None:
    assert split_frontmatter("# Title") == ({}, "# Title")
    assert split_frontmatter("---\nname: x\nno closing fence") == (
        {},
        "---\nname: x\nno closing fence",
    )


@pytest.mark.parametrize("yaml_text", ["name: [unclosed", "- just\n- a list"])
def test_split_frontmatter_rejects_bad_yaml(yaml_text) -> None:
    with pytest.raises(FrontmatterError):
        split_frontmatter(f"---\n{yaml_text}\n---\nbody")


@pytest.mark.asyncio
async def test_load_plugin_and_resolve(write_plugin) -> None:
    root = write_plugin(
        commands={"build": BUILD_MD, "add-backend": ADD_BACKEND_MD},
        agents=["flutter-builder", "flutter-firebase-core"],
    )

    result = await load_plugin(root)

    assert result.ok, result.errors
    registry = result.unwrap()
    assert registry.names() == ["add-backend", "build"]
    assert result.agents == frozenset({"flutter-builder", "flutter-firebase-core"})
    assert registry.lookup("build").source == root / "commands" / "build.md"

    resolver = Resolver(registry)
    context = resolver.resolve_line("/build --platform ios").unwrap()
    assert context.values == {"platform": "ios", "release": False}


@pytest.mark.asyncio
async def test_command_name_defaults_to_file_stem(write_plugin) -> None:
    root = write_plugin(commands={"add-backend": ADD_BACKEND_MD}, agents=["flutter-firebase-core"])
    registry = (await load_plugin(root)).unwrap()
    assert "add-backend" in registry


@pytest.mark.asyncio
async def test_dangling_agent_reference(write_plugin) -> None:
    root = write_plugin(commands={"add-backend": ADD_BACKEND_MD}, agents=["flutter-builder"])

    result = await load_plugin(root)

    assert not result.ok
    assert result.registry is None
    assert result.errors == [DanglingAgentReferenceError("add-backend", "flutter-firebase-core")]
    with pytest.raises(RegistryValidationError):
        result.unwrap()


@pytest.mark.asyncio
async def test_extra_agents_satisfy_references(write_plugin) -> None:
    root = write_plugin(commands={"add-backend": ADD_BACKEND_MD})
    result = await load_plugin(root, extra_agents=["flutter-firebase-core"])
    assert result.ok


@pytest.mark.asyncio
async def test_agent_name_falls_back_to_file_stem(write_plugin) -> None:
    root = write_plugin(commands={"add-backend": ADD_BACKEND_MD})
    (root / "agents" / "flutter-firebase-core.md").write_text("# No frontmatter\n")
    assert (await load_plugin(root)).ok


@pytest.mark.asyncio
async def test_all_load_errors_are_collected(write_plugin) -> None:
    root = write_plugin(
        commands={
            "build": BUILD_MD,
            "build-copy": BUILD_MD,
            "bad-choice": "name: bad-choice\narguments:\n  - name: p\n    type: choice",
            "add-backend": ADD_BACKEND_MD,
        },
        agents=["flutter-builder"],
    )
    (root / "commands" / "broken.md").write_text("---\nname: [oops\n---\n")

    result = await load_plugin(root)

    assert result.registry is None
    kinds = [type(e) for e in result.errors]
    assert kinds.count(InvalidSchemaError) == 2
    assert kinds.count(DuplicateCommandError) == 1
    assert kinds.count(DanglingAgentReferenceError) == 1

    schema_errors = {e.command: e.kind for e in result.errors if isinstance(e, InvalidSchemaError)}
    assert schema_errors == {
        "bad-choice": SchemaErrorKind.MISSING_CHOICES,
        "broken": SchemaErrorKind.MALFORMED,
    }


@pytest.mark.asyncio
async def test_missing_directories_give_empty_registry(tmp_path) -> None:
    result = await load_plugin(tmp_path)
    assert result.ok
    assert len(result.unwrap()) == 0


@pytest.mark.asyncio
async def test_manifest_matching_files(write_plugin) -> None:
    root = write_plugin(
        commands={"build": BUILD_MD},
        agents=["flutter-builder"],
        manifest={
            "name": "flutter-developer",
            "commands": ["./commands/build.md"],
            "agents": ["./agents/flutter-builder.md"],
        },
    )
    assert (await load_plugin(root)).ok


@pytest.mark.asyncio
async def test_manifest_mismatch_is_reported(write_plugin) -> None:
    root = write_plugin(
        commands={"build": BUILD_MD},
        agents=["flutter-builder"],
        manifest={"commands": ["./commands/build.md", "./commands/test.md"], "agents": "./agents/"},
    )

    result = await load_plugin(root)

    assert not result.ok
    assert len(result.errors) == 1
    error = result.errors[0]
    assert isinstance(error, ManifestMismatchError)
    assert error.section == "commands"
    assert "missing files: test" in error.detail


@pytest.mark.asyncio
async def test_invalid_manifest_json(write_plugin) -> None:
    root = write_plugin(commands={"build": BUILD_MD}, agents=["flutter-builder"], manifest={})
    (root / ".claude-plugin" / "plugin.json").write_text("{not json")

    result = await load_plugin(root)

    assert [type(e) for e in result.errors] == [ManifestMismatchError]


@pytest.mark.asyncio
async def test_layout_follows_config(write_plugin, set_config) -> None:
    root = write_plugin(commands={"build": BUILD_MD}, agents=["flutter-builder"])
    (root / "commands").rename(root / "slash")
    set_config(COMMANDS_DIR="slash")

    registry = (await load_plugin(root)).unwrap()

    assert registry.names() == ["build"]


@pytest.mark.asyncio
async def test_bundled_example_plugin_is_valid() -> None:
    root = Path(__file__).resolve().parent.parent / "examples" / "flutter-plugin"

    registry = (await load_plugin(root)).unwrap()

    assert registry.names() == ["add-backend", "build", "test"]
    context = Resolver(registry).resolve_line("/test test/a test/b --shards 2").unwrap()
    assert context.values == {"paths": ("test/a", "test/b"), "coverage": False, "shards": 2}


@pytest.mark.asyncio
async def test_undecodable_command_file_is_collected(write_plugin) -> None:
    root = write_plugin(commands={"build": BUILD_MD}, agents=["flutter-builder"])
    (root / "commands" / "bad.md").write_bytes(b"---\nname: bad\n---\n\xff\xfe")

    result = await load_plugin(root)

    assert result.registry is None
    assert len(result.errors) == 1
    error = result.errors[0]
    assert isinstance(error, InvalidSchemaError)
    assert error.kind is SchemaErrorKind.MALFORMED
    assert error.command == "bad"


@pytest.mark.asyncio
async def test_undecodable_agent_file_falls_back_to_file_stem(write_plugin) -> None:
    root = write_plugin(commands={"build": BUILD_MD})
    (root / "agents" / "flutter-builder.md").write_bytes(b"\xff\xfe agent")

    result = await load_plugin(root)

    assert result.ok
    assert result.agents == frozenset({"flutter-builder"})


@pytest.mark.asyncio
async def test_undecodable_manifest_is_reported(write_plugin) -> None:
    root = write_plugin(commands={"build": BUILD_MD}, agents=["flutter-builder"], manifest={})
    (root / ".claude-plugin" / "plugin.json").write_bytes(b"\xff\xfe{}")

    result = await load_plugin(root)

    assert [type(e) for e in result.errors] == [ManifestMismatchError]
