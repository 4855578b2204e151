"""Load command and agent declarations from a plugin directory.

Layout::

    <plugin>/
      .claude-plugin/plugin.json   optional manifest
      commands/*.md                YAML frontmatter = command declaration
      agents/*.md                  one agent per file

The core (parser, registry, resolver) never touches the filesystem; this module
is the collaborator that feeds it.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import aiofiles
import aiofiles.os
import yaml

from config import Config
from utils import get_logger, log_context

from .errors import (
    DuplicateCommandError,
    InvalidSchemaError,
    LoadError,
    ManifestMismatchError,
    RegistryValidationError,
    SchemaErrorKind,
)
from .parser import parse_schema
from .registry import CommandRegistry
from .types import CommandSchema

logger = get_logger(__name__)


class FrontmatterError(ValueError):
    pass


@dataclass(frozen=True)
class CommandDeclaration:
    data: dict[str, Any]
    path: Path
    body: str = ""


@dataclass
class PluginLoadResult:
    """Registry built from a plugin, or every load error that prevented it."""

    root: Path
    registry: CommandRegistry | None
    agents: frozenset[str] = frozenset()
    errors: list[LoadError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.registry is not None and not self.errors

    def unwrap(self) -> CommandRegistry:
        if self.registry is None or self.errors:
            raise RegistryValidationError(self.errors)
        return self.registry


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split ``---`` fenced YAML frontmatter from the Markdown body.

    Text without frontmatter yields an empty mapping and the text unchanged.

    Raises:
        FrontmatterError: If the YAML is invalid or is not a mapping.
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, text

    end_idx = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end_idx = i
            break

    if end_idx is None:
        return {}, text

    yaml_text = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :])

    try:
        data = yaml.safe_load(yaml_text) or {}
    except yaml.YAMLError as e:
        raise FrontmatterError(f"invalid YAML frontmatter: {e}") from e

    if not isinstance(data, dict):
        raise FrontmatterError("frontmatter must be a mapping")

    return data, body


async def read_text(path: Path) -> str:
    async with aiofiles.open(path, encoding="utf-8") as handle:
        return await handle.read()


async def list_markdown_files(directory: Path) -> list[Path]:
    if not await aiofiles.os.path.exists(directory):
        return []

    def _collect() -> list[Path]:
        return sorted(p for p in directory.glob("*.md") if p.is_file())

    return await asyncio.to_thread(_collect)


async def load_command_declarations(
    commands_dir: Path,
) -> tuple[list[CommandDeclaration], list[LoadError]]:
    declarations: list[CommandDeclaration] = []
    errors: list[LoadError] = []
    for path in await list_markdown_files(commands_dir):
        try:
            content = await read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable command file {path}: {e}")
            errors.append(
                InvalidSchemaError(
                    SchemaErrorKind.MALFORMED, f"unreadable file: {e}", command=path.stem
                )
            )
            continue
        try:
            frontmatter, body = split_frontmatter(content)
        except FrontmatterError as e:
            logger.warning(f"Skipping command file {path}: {e}")
            errors.append(
                InvalidSchemaError(SchemaErrorKind.MALFORMED, str(e), command=path.stem)
            )
            continue
        data = dict(frontmatter)
        data.setdefault("name", path.stem)
        declarations.append(CommandDeclaration(data=data, path=path, body=body.strip()))
    return declarations, errors


async def load_agent_names(agents_dir: Path) -> set[str]:
    names: set[str] = set()
    for path in await list_markdown_files(agents_dir):
        try:
            frontmatter, _ = split_frontmatter(await read_text(path))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Agent file {path} is unreadable, using file name: {e}")
            frontmatter = {}
        except FrontmatterError as e:
            logger.warning(f"Agent file {path} has unreadable frontmatter, using file name: {e}")
            frontmatter = {}
        name = str(frontmatter.get("name") or path.stem).strip()
        names.add(name)
    return names


async def read_manifest(path: Path) -> dict[str, Any] | None:
    if not await aiofiles.os.path.exists(path):
        return None
    try:
        data = json.loads(await read_text(path))
    except json.JSONDecodeError as e:
        raise ManifestMismatchError("plugin.json", f"invalid JSON: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestMismatchError("plugin.json", f"unreadable file: {e}") from e
    if not isinstance(data, dict):
        raise ManifestMismatchError("plugin.json", "manifest must be a JSON object")
    return data


def check_manifest_section(
    manifest: dict[str, Any], section: str, on_disk: Iterable[Path]
) -> ManifestMismatchError | None:
    """Compare a manifest ``commands``/``agents`` list against files on disk.

    Only list-valued sections are checked; a string value is a directory
    override and carries no count.
    """
    declared = manifest.get(section)
    if not isinstance(declared, list):
        return None

    declared_stems = {Path(str(entry)).stem for entry in declared}
    disk_stems = {p.stem for p in on_disk}
    missing = sorted(declared_stems - disk_stems)
    extra = sorted(disk_stems - declared_stems)
    if not missing and not extra:
        return None

    parts = [f"declares {len(declared_stems)}, found {len(disk_stems)}"]
    if missing:
        parts.append(f"missing files: {', '.join(missing)}")
    if extra:
        parts.append(f"undeclared files: {', '.join(extra)}")
    return ManifestMismatchError(section, "; ".join(parts))


def build_registry(
    declarations: Iterable[CommandDeclaration],
) -> tuple[CommandRegistry, list[LoadError]]:
    """Parse and register declarations, collecting errors instead of stopping."""
    registry = CommandRegistry()
    errors: list[LoadError] = []
    for declaration in declarations:
        try:
            schema: CommandSchema = parse_schema(declaration.data, source=declaration.path)
            registry.register(schema)
        except (InvalidSchemaError, DuplicateCommandError) as e:
            logger.warning(f"Rejected command from {declaration.path}: {e}")
            errors.append(e)
    return registry, errors


async def load_plugin(
    root: Path | str,
    extra_agents: Iterable[str] = (),
    commands_dir: str | None = None,
    agents_dir: str | None = None,
    manifest_path: str | None = None,
) -> PluginLoadResult:
    """Load, validate and freeze every command declared by a plugin.

    All load-time problems (bad declarations, duplicate names, dangling agent
    references, manifest mismatches) are collected. The result only carries a
    registry when there are none.
    """
    root = Path(root).expanduser()
    with log_context(plugin=root.resolve().name):
        return await _load_plugin(
            root,
            extra_agents,
            root / (commands_dir or Config.COMMANDS_DIR),
            root / (agents_dir or Config.AGENTS_DIR),
            root / (manifest_path or Config.MANIFEST_PATH),
        )


async def _load_plugin(
    root: Path,
    extra_agents: Iterable[str],
    commands_path: Path,
    agents_path: Path,
    manifest_file: Path,
) -> PluginLoadResult:
    declarations, errors = await load_command_declarations(commands_path)
    agents = await load_agent_names(agents_path)
    agents.update(a.strip() for a in extra_agents if a.strip())

    try:
        manifest = await read_manifest(manifest_file)
    except ManifestMismatchError as e:
        errors.append(e)
        manifest = None
    if manifest is not None:
        for section, directory in (("commands", commands_path), ("agents", agents_path)):
            mismatch = check_manifest_section(
                manifest, section, await list_markdown_files(directory)
            )
            if mismatch is not None:
                errors.append(mismatch)

    registry, build_errors = build_registry(declarations)
    errors.extend(build_errors)
    errors.extend(registry.finalize_and_validate(agents))

    logger.info(
        f"Loaded {len(registry)} command(s) and {len(agents)} agent(s) from {root} "
        f"with {len(errors)} error(s)"
    )
    if errors:
        return PluginLoadResult(root=root, registry=None, agents=frozenset(agents), errors=errors)
    return PluginLoadResult(root=root, registry=registry, agents=frozenset(agents))
