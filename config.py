"""Configuration management for cmdschema."""

import os

# Path constants are defined here rather than imported from utils.runtime
# (utils.terminal_ui imports Config, and utils/__init__ imports terminal_ui)
_RUNTIME_DIR = os.path.join(os.path.expanduser("~"), ".cmdschema")
_CONFIG_FILE = os.path.join(_RUNTIME_DIR, "config")
_ENV_PREFIX = "CMDSCHEMA_"

# Template written by `cmdschema init-config`
DEFAULT_CONFIG = """\
# cmdschema configuration

# Logging (only active with --verbose)
LOG_LEVEL=DEBUG

# Terminal theme: dark or light
TUI_THEME=dark

# Prefix stripped from the first token of a command line
COMMAND_PREFIX=/

# Repeated flags in one invocation: last, first or reject
DUPLICATE_OPTION_POLICY=last

# Plugin layout, relative to the plugin root
COMMANDS_DIR=commands
AGENTS_DIR=agents
MANIFEST_PATH=.claude-plugin/plugin.json
"""

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_THEMES = {"dark", "light"}
_DUPLICATE_POLICIES = {"last", "first", "reject"}


def _load_config(path: str) -> dict[str, str]:
    """Parse a KEY=VALUE config file, skipping comments and blank lines."""
    cfg: dict[str, str] = {}
    if not os.path.isfile(path):
        return cfg
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            # Strip inline comments (# ...) from the value
            if "#" in value:
                value = value[: value.index("#")]
            cfg[key.strip()] = value.strip()
    return cfg


def _load_env(environ: dict[str, str]) -> dict[str, str]:
    """Collect CMDSCHEMA_<KEY> environment overrides."""
    return {
        key[len(_ENV_PREFIX) :]: value.strip()
        for key, value in environ.items()
        if key.startswith(_ENV_PREFIX) and value.strip()
    }


def write_default_config(path: str = _CONFIG_FILE) -> bool:
    """Create the config file with defaults. Returns False if it already exists."""
    if os.path.exists(path):
        return False
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(DEFAULT_CONFIG)
    return True


_cfg = _load_config(_CONFIG_FILE)
_cfg.update(_load_env(dict(os.environ)))


class Config:
    """Configuration for cmdschema.

    Values come from ~/.cmdschema/config, overridden by CMDSCHEMA_<KEY>
    environment variables. Access config values directly via Config.XXX.
    """

    CONFIG_FILE = _CONFIG_FILE

    # Logging Configuration
    # Note: Logging is controlled via --verbose flag
    LOG_LEVEL = _cfg.get("LOG_LEVEL", "DEBUG").upper()

    # Terminal output
    TUI_THEME = _cfg.get("TUI_THEME", "dark")  # "dark" or "light"

    # Invocation parsing
    COMMAND_PREFIX = _cfg.get("COMMAND_PREFIX", "/")
    DUPLICATE_OPTION_POLICY = _cfg.get("DUPLICATE_OPTION_POLICY", "last").lower()

    # Plugin layout
    COMMANDS_DIR = _cfg.get("COMMANDS_DIR", "commands")
    AGENTS_DIR = _cfg.get("AGENTS_DIR", "agents")
    MANIFEST_PATH = _cfg.get("MANIFEST_PATH", ".claude-plugin/plugin.json")

    @classmethod
    def as_dict(cls) -> dict[str, str]:
        return {
            "LOG_LEVEL": cls.LOG_LEVEL,
            "TUI_THEME": cls.TUI_THEME,
            "COMMAND_PREFIX": cls.COMMAND_PREFIX,
            "DUPLICATE_OPTION_POLICY": cls.DUPLICATE_OPTION_POLICY,
            "COMMANDS_DIR": cls.COMMANDS_DIR,
            "AGENTS_DIR": cls.AGENTS_DIR,
            "MANIFEST_PATH": cls.MANIFEST_PATH,
        }

    @classmethod
    def validate(cls):
        """Validate configuration values.

        Raises:
            ValueError: If a configuration value is not supported
        """
        if cls.LOG_LEVEL not in _LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}, got '{cls.LOG_LEVEL}'."
            )
        if cls.TUI_THEME not in _THEMES:
            raise ValueError(f"TUI_THEME must be 'dark' or 'light', got '{cls.TUI_THEME}'.")
        if cls.DUPLICATE_OPTION_POLICY not in _DUPLICATE_POLICIES:
            raise ValueError(
                "DUPLICATE_OPTION_POLICY must be one of "
                f"{', '.join(sorted(_DUPLICATE_POLICIES))}, got '{cls.DUPLICATE_OPTION_POLICY}'."
            )
        for key in ("COMMANDS_DIR", "AGENTS_DIR", "MANIFEST_PATH"):
            if not getattr(cls, key):
                raise ValueError(f"{key} cannot be empty. Set it in {cls.CONFIG_FILE}.")
