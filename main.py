"""Main entry point for the cmdschema command line."""

import argparse
import asyncio
import importlib.metadata
import json
import shlex
from typing import Optional, Sequence

from cmdschema import Resolver, UnknownCommandError, render_commands_section
from cmdschema.loader import PluginLoadResult, load_plugin
from config import Config, write_default_config
from utils import get_log_file_path, get_logger, log_context, setup_logger, terminal_ui
from utils.runtime import ensure_runtime_dirs

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_INVOCATION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdschema",
        description="Validate plugin command schemas and resolve invocations against them",
    )

    try:
        version = importlib.metadata.version("cmdschema")
    except importlib.metadata.PackageNotFoundError:
        version = "dev"
    parser.add_argument("--version", "-V", action="version", version=f"cmdschema {version}")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging to ~/.cmdschema/logs/",
    )
    parser.add_argument(
        "--agent",
        "-a",
        action="append",
        default=[],
        metavar="NAME",
        help="Treat NAME as a known agent in addition to the plugin's agents/ (repeatable)",
    )

    sub = parser.add_subparsers(dest="action", required=True)

    validate = sub.add_parser("validate", help="Load a plugin and report every load error")
    validate.add_argument("plugin", help="Plugin root directory")

    list_cmd = sub.add_parser("list", help="List the commands a plugin declares")
    list_cmd.add_argument("plugin", help="Plugin root directory")
    list_cmd.add_argument(
        "--markdown", action="store_true", help="Print the Markdown commands section"
    )

    describe = sub.add_parser("describe", help="Show one command's argument contract")
    describe.add_argument("plugin", help="Plugin root directory")
    describe.add_argument("command", help="Command name")

    resolve = sub.add_parser("resolve", help="Resolve a command line against a plugin")
    resolve.add_argument("--json", action="store_true", help="Print the result as JSON")
    resolve.add_argument("plugin", help="Plugin root directory")
    resolve.add_argument(
        "line",
        nargs=argparse.REMAINDER,
        help="Command line, e.g. '/build --platform ios'",
    )

    sub.add_parser("config", help="Show the effective configuration")
    sub.add_parser("init-config", help=f"Write a default config to {Config.CONFIG_FILE}")

    return parser


async def _load(args: argparse.Namespace) -> PluginLoadResult:
    return await load_plugin(args.plugin, extra_agents=args.agent)


def _load_or_report(args: argparse.Namespace) -> Optional[PluginLoadResult]:
    result = asyncio.run(_load(args))
    if not result.ok:
        terminal_ui.print_load_errors(result.errors, title=f"Load Errors in {result.root}")
        return None
    return result


def _cmd_validate(args: argparse.Namespace) -> int:
    result = _load_or_report(args)
    if result is None:
        return EXIT_LOAD_ERROR
    registry = result.unwrap()
    terminal_ui.print_success(
        f"{len(registry)} command(s) valid against {len(result.agents)} agent(s)"
    )
    return EXIT_OK


def _cmd_list(args: argparse.Namespace) -> int:
    result = _load_or_report(args)
    if result is None:
        return EXIT_LOAD_ERROR
    registry = result.unwrap()
    if args.markdown:
        section = render_commands_section(registry.schemas(), prefix=Config.COMMAND_PREFIX)
        print(section or "")
        return EXIT_OK
    if not len(registry):
        terminal_ui.print_warning(f"No commands found in {result.root}")
        return EXIT_OK
    terminal_ui.print_command_table(registry.schemas(), prefix=Config.COMMAND_PREFIX)
    return EXIT_OK


def _cmd_describe(args: argparse.Namespace) -> int:
    result = _load_or_report(args)
    if result is None:
        return EXIT_LOAD_ERROR
    try:
        schema = result.unwrap().lookup(args.command)
    except UnknownCommandError as e:
        terminal_ui.print_error(str(e), title="Unknown Command")
        return EXIT_INVOCATION_ERROR
    terminal_ui.print_command_detail(schema, prefix=Config.COMMAND_PREFIX)
    return EXIT_OK


def _cmd_resolve(args: argparse.Namespace) -> int:
    result = _load_or_report(args)
    if result is None:
        return EXIT_LOAD_ERROR

    tokens = args.line[1:] if args.line[:1] == ["--"] else args.line
    # A single argument is an already-quoted line; several are shell-split tokens
    line = tokens[0] if len(tokens) == 1 else shlex.join(tokens)

    resolver = Resolver(
        result.unwrap(),
        prefix=Config.COMMAND_PREFIX,
        duplicate_policy=Config.DUPLICATE_OPTION_POLICY,
    )
    with log_context(line=line):
        resolution = resolver.resolve_line(line)
        logger.info(f"Resolved: {'ok' if resolution.ok else resolution.error}")

    if args.json:
        payload = (
            {"ok": True, "context": resolution.context.to_dict()}
            if resolution.ok
            else {"ok": False, "error": resolution.error.to_dict()}
        )
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    elif resolution.ok:
        terminal_ui.print_invocation(resolution.context)
    else:
        terminal_ui.print_error(str(resolution.error), title="Invocation Error")

    return EXIT_OK if resolution.ok else EXIT_INVOCATION_ERROR


def _cmd_config(args: argparse.Namespace) -> int:
    terminal_ui.print_config(Config.as_dict())
    return EXIT_OK


def _cmd_init_config(args: argparse.Namespace) -> int:
    if write_default_config(Config.CONFIG_FILE):
        terminal_ui.print_success(f"Wrote default config to {Config.CONFIG_FILE}")
    else:
        terminal_ui.print_warning(f"Config already exists at {Config.CONFIG_FILE}")
    return EXIT_OK


_ACTIONS = {
    "validate": _cmd_validate,
    "list": _cmd_list,
    "describe": _cmd_describe,
    "resolve": _cmd_resolve,
    "config": _cmd_config,
    "init-config": _cmd_init_config,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.action == "resolve" and not args.line:
        parser.error("resolve needs a command line, e.g. cmdschema resolve ./plugin /build")

    # Initialize runtime directories and logging only in verbose mode
    if args.verbose:
        ensure_runtime_dirs(create_logs=True)
        setup_logger()

    try:
        Config.validate()
    except ValueError as e:
        terminal_ui.print_error(str(e), title="Configuration Error")
        return EXIT_LOAD_ERROR

    with log_context(action=args.action):
        code = _ACTIONS[args.action](args)

    log_file = get_log_file_path()
    if args.verbose and log_file:
        terminal_ui.print_log_location(log_file)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
