"""Utility modules for cmdschema."""

from . import terminal_ui
from .logger import get_log_file_path, get_logger, log_context, setup_logger

# Runtime helpers are imported from utils.runtime directly (config imports it)

__all__ = [
    "setup_logger",
    "get_logger",
    "get_log_file_path",
    "log_context",
    "terminal_ui",
]
