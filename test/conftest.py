"""Shared fixtures for cmdschema tests."""

import json
import textwrap

import pytest

from cmdschema import CommandRegistry, Resolver, parse_schema
from config import Config

BUILD = {
    "name": "build",
    "description": "Build the app for a platform.",
    "arguments": [
        {"name": "platform", "type": "choice", "choices": ["ios", "android"], "required": True},
        {"name": "release", "type": "boolean", "default": False},
        {"name": "flavor", "type": "string"},
    ],
    "agents": ["flutter-builder"],
}

TEST = {
    "name": "test",
    "arguments": [{"name": "coverage", "type": "boolean", "required": False, "default": False}],
}

ADD_BACKEND = {
    "name": "add-backend",
    "arguments": [
        {
            "name": "provider",
            "kind": "positional",
            "type": "choice",
            "choices": ["firebase", "supabase"],
            "required": True,
        },
        {"name": "feature", "kind": "positional", "type": "string"},
        {"name": "retries", "type": "integer", "default": 3},
    ],
    "agents": ["flutter-firebase-core"],
}


@pytest.fixture
def registry() -> CommandRegistry:
    reg = CommandRegistry(parse_schema(d) for d in (BUILD, TEST, ADD_BACKEND))
    assert reg.finalize_and_validate({"flutter-builder", "flutter-firebase-core"}) == []
    return reg


@pytest.fixture
def resolver(registry) -> Resolver:
    return Resolver(registry)


@pytest.fixture
def set_config(monkeypatch):
    """Temporarily override Config attributes.

    Usage:
        def test_something(set_config):
            set_config(DUPLICATE_OPTION_POLICY="reject")
    """

    def _set_config(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setattr(Config, key, value)

    return _set_config


@pytest.fixture
def write_plugin(tmp_path):
    """Create a plugin directory from command frontmatter and agent names."""

    def _write(commands=None, agents=(), manifest=None, root_name="plugin"):
        root = tmp_path / root_name
        commands_dir = root / "commands"
        agents_dir = root / "agents"
        commands_dir.mkdir(parents=True)
        agents_dir.mkdir(parents=True)

        for filename, frontmatter in (commands or {}).items():
            text = textwrap.dedent(frontmatter).strip()
            (commands_dir / f"{filename}.md").write_text(
                f"---\n{text}\n---\n\nRun the {filename} workflow.\n", encoding="utf-8"
            )

        for agent in agents:
            (agents_dir / f"{agent}.md").write_text(
                f"---\nname: {agent}\ndescription: Agent {agent}.\n---\n\nInstructions.\n",
                encoding="utf-8",
            )

        if manifest is not None:
            manifest_dir = root / ".claude-plugin"
            manifest_dir.mkdir()
            (manifest_dir / "plugin.json").write_text(json.dumps(manifest), encoding="utf-8")

        return root

    return _write


@pytest.fixture
def declarations() -> dict:
    return {"build": BUILD, "test": TEST, "add-backend": ADD_BACKEND}
