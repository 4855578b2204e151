"""Terminal UI utilities using Rich library for formatted output.

This module is the presentation layer for the CLI; the cmdschema core never
prints.
"""

from typing import Any, Dict, Iterable, Optional

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cmdschema.errors import CmdSchemaError
from cmdschema.render import describe_argument, format_usage
from cmdschema.types import CommandSchema, InvocationContext
from config import Config
from utils.theme import Theme, set_theme

# Initialize theme from config; Config.validate() reports bad values later
set_theme(Config.TUI_THEME if Config.TUI_THEME in Theme.names() else "dark")

# Global console instance with theme support
console = Console(theme=Theme.get_rich_theme())


def _get_colors():
    """Get current theme colors."""
    return Theme.get_colors()


def print_header(title: str, subtitle: Optional[str] = None) -> None:
    """Print a formatted header panel.

    Args:
        title: Main title text
        subtitle: Optional subtitle text
    """
    colors = _get_colors()
    content = f"[bold {colors.primary}]{title}[/bold {colors.primary}]"
    if subtitle:
        content += f"\n[{colors.text_secondary}]{subtitle}[/{colors.text_secondary}]"

    console.print(Panel(content, border_style=colors.primary, box=box.DOUBLE, padding=(1, 2)))


def print_config(config: Dict[str, Any]) -> None:
    """Print configuration in a formatted table.

    Args:
        config: Dictionary of configuration key-value pairs
    """
    colors = _get_colors()
    table = Table(show_header=False, box=box.SIMPLE, border_style=colors.text_muted, padding=(0, 2))
    table.add_column("Key", style=f"{colors.primary} bold")
    table.add_column("Value", style=colors.success)

    for key, value in config.items():
        table.add_row(key, str(value))

    console.print(table)


def print_command_table(schemas: Iterable[CommandSchema], prefix: str = "/") -> None:
    """Print registered commands with usage and agent references.

    Args:
        schemas: Command schemas to list
        prefix: Invocation prefix shown in usage lines
    """
    colors = _get_colors()
    table = Table(
        show_header=True,
        header_style=f"bold {colors.primary}",
        box=box.ROUNDED,
        border_style=colors.text_muted,
        padding=(0, 1),
    )
    table.add_column("Command", style=colors.command_accent)
    table.add_column("Usage", style=colors.text_primary)
    table.add_column("Agents", style=colors.agent_accent)

    for schema in schemas:
        table.add_row(
            schema.name,
            escape(format_usage(schema, prefix)),
            ", ".join(sorted(schema.agent_refs)) or "-",
        )

    console.print(table)


def print_command_detail(schema: CommandSchema, prefix: str = "/") -> None:
    """Print one command's usage and argument contract.

    Args:
        schema: Command schema to describe
        prefix: Invocation prefix shown in the usage line
    """
    colors = _get_colors()
    usage = escape(format_usage(schema, prefix))
    lines = [f"[{colors.command_accent}]{usage}[/{colors.command_accent}]"]
    if schema.description:
        lines.append("")
        lines.append(escape(schema.description))
    if schema.arguments:
        lines.append("")
        lines.extend(f"- {escape(describe_argument(arg))}" for arg in schema.arguments)
    if schema.agent_refs:
        lines.append("")
        lines.append(
            f"[{colors.agent_accent}]agents: {', '.join(sorted(schema.agent_refs))}"
            f"[/{colors.agent_accent}]"
        )

    console.print(
        Panel(
            "\n".join(lines),
            title=f"[bold {colors.primary}]{schema.name}[/bold {colors.primary}]",
            title_align="left",
            border_style=colors.text_muted,
            box=box.ROUNDED,
            padding=(0, 1),
        )
    )


def print_invocation(context: InvocationContext) -> None:
    """Print the typed values of a resolved invocation.

    Args:
        context: Resolved invocation
    """
    colors = _get_colors()
    table = Table(show_header=True, box=box.SIMPLE, header_style=f"bold {colors.primary}")
    table.add_column("Argument", style=colors.argument_accent)
    table.add_column("Value", style=colors.success)
    table.add_column("Type", style=colors.text_secondary)

    for name, value in context.values.items():
        table.add_row(name, repr(value), type(value).__name__)

    console.print(f"[bold {colors.command_accent}]{context.command}[/bold {colors.command_accent}]")
    console.print(table)


def print_load_errors(errors: Iterable[CmdSchemaError], title: str = "Load Errors") -> None:
    """Print every collected load-time error in one panel.

    Args:
        errors: Errors collected while loading a plugin
        title: Panel title
    """
    colors = _get_colors()
    lines = [f"[{colors.error}]•[/{colors.error}] {escape(str(err))}" for err in errors]
    console.print(
        Panel(
            "\n".join(lines),
            title=f"[bold {colors.error}]{title} ({len(lines)})[/bold {colors.error}]",
            border_style=colors.error,
            box=box.ROUNDED,
        )
    )


def print_error(message: str, title: str = "Error") -> None:
    """Print an error message.

    Args:
        message: Error message
        title: Error title (default: "Error")
    """
    colors = _get_colors()
    console.print(
        Panel(
            f"[{colors.error}]{escape(message)}[/{colors.error}]",
            title=f"[bold {colors.error}]{title}[/bold {colors.error}]",
            border_style=colors.error,
            box=box.ROUNDED,
        )
    )


def print_warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: Warning message
    """
    colors = _get_colors()
    console.print(f"[{colors.warning}]{message}[/{colors.warning}]")


def print_success(message: str) -> None:
    """Print a success message.

    Args:
        message: Success message
    """
    colors = _get_colors()
    console.print(f"[{colors.success}]✓ {message}[/{colors.success}]")


def print_info(message: str) -> None:
    """Print an info message.

    Args:
        message: Info message
    """
    colors = _get_colors()
    console.print(f"[{colors.primary}]ℹ {message}[/{colors.primary}]")


def print_log_location(log_file: str) -> None:
    """Print log file location.

    Args:
        log_file: Path to log file
    """
    colors = _get_colors()
    console.print()
    console.print(f"[{colors.text_muted}]Detailed logs: {log_file}[/{colors.text_muted}]")


def print_markdown(markdown_text: str) -> None:
    """Print formatted markdown.

    Args:
        markdown_text: Markdown text to render
    """
    console.print(Markdown(markdown_text))
