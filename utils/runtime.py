"""Runtime directory management for cmdschema.

All runtime data is stored under ~/.cmdschema/:
- config: Configuration file (created by `cmdschema init-config`)
- logs/: Log files (only created with --verbose)
"""

import os

RUNTIME_DIR = os.path.join(os.path.expanduser("~"), ".cmdschema")


def get_log_dir() -> str:
    """Get the log directory path.

    Returns:
        Path to ~/.cmdschema/logs/
    """
    return os.path.join(RUNTIME_DIR, "logs")


def ensure_runtime_dirs(create_logs: bool = False) -> None:
    """Ensure runtime directories exist.

    Args:
        create_logs: Whether to create the logs directory (for --verbose mode)
    """
    os.makedirs(RUNTIME_DIR, exist_ok=True)

    if create_logs:
        os.makedirs(get_log_dir(), exist_ok=True)
