"""Logging for cmdschema.

Nothing is written until ``setup_logger`` runs (the CLI calls it for
``--verbose``). Every record written to the log file carries the active
``log_context``: the plugin being loaded, the CLI action, the command line
being resolved.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from .runtime import get_log_dir

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(context)s] %(message)s"

_context: ContextVar[tuple[tuple[str, str], ...]] = ContextVar("cmdschema_log_context", default=())
_log_file_path: Optional[str] = None


class ContextFilter(logging.Filter):
    """Copy the active log context onto each record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = format_context() or "-"
        return True


@contextmanager
def log_context(**fields: object) -> Iterator[None]:
    """Add ``key=value`` fields to every record logged inside the block.

    Nested blocks extend the outer context; a repeated key shows the inner value.
    """
    merged = dict(_context.get())
    merged.update((key, str(value)) for key, value in fields.items())
    token = _context.set(tuple(merged.items()))
    try:
        yield
    finally:
        _context.reset(token)


def current_context() -> dict[str, str]:
    return dict(_context.get())


def format_context() -> str:
    return " ".join(f"{key}={value}" for key, value in _context.get())


def setup_logger(
    log_dir: Optional[str] = None,
    log_level: Optional[str] = None,
    log_to_console: bool = False,
) -> Optional[str]:
    """Attach a file handler to the root logger, once per process.

    Args:
        log_dir: Directory for the log file (default: ~/.cmdschema/logs/)
        log_level: Level name; defaults to Config.LOG_LEVEL
        log_to_console: Also echo warnings and errors to stderr

    Returns:
        Path of the log file.
    """
    global _log_file_path

    if _log_file_path is not None:
        return _log_file_path

    if log_level is None:
        from config import Config

        log_level = Config.LOG_LEVEL
    level = getattr(logging, log_level.upper(), logging.DEBUG)

    log_path = Path(log_dir or get_log_dir())
    log_path.mkdir(exist_ok=True, parents=True)
    log_file = log_path / f"cmdschema_{datetime.now():%Y%m%d_%H%M%S}.log"

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [logging.FileHandler(log_file, encoding="utf-8")]
    if log_to_console:
        stderr_handler = logging.StreamHandler()
        stderr_handler.setLevel(logging.WARNING)
        handlers.append(stderr_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(ContextFilter())
        if handler.level == logging.NOTSET:
            handler.setLevel(level)
        logging.root.addHandler(handler)
    logging.root.setLevel(level)

    _log_file_path = str(log_file)
    logging.getLogger(__name__).info(f"Logging to {_log_file_path} at {log_level}")
    return _log_file_path


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_log_file_path() -> Optional[str]:
    """Path of the current log file, or None when file logging is off."""
    return _log_file_path
