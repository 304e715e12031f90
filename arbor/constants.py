"""
Constants for the Arbor outline manager.

Note: These constants serve as default fallback values.
Actual values are loaded from .arbor/config.json at runtime via ConfigManager.
"""
from pathlib import Path
from typing import Any, Optional
import json

# =============================================================================
# Default Fallback Values
# These are used if config.json doesn't exist or doesn't specify a value.
# =============================================================================

DEFAULT_ARBOR_DIR = ".arbor"

# Identifier defaults
DEFAULT_ID_LENGTH = 8
ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"

# Content node text cap (truncation, not rejection)
DEFAULT_TEXT_MAX_LENGTH = 100

# Outline parsing / rendering
DEFAULT_INDENT_UNIT = 4
DEFAULT_EXPORT_INDENT = 4
TAB_WIDTH = 4

# Titles used when the caller does not provide one
DEFAULT_ROOT_TITLE = "My Documents"
DEFAULT_IMPORT_TITLE = "Imported Note"
DEFAULT_CANDIDATE_TITLE = "AI Outline"
DEFAULT_NODE_TEXT = "New node"
COPY_SUFFIX = " (copy)"

# Concurrency defaults
DEFAULT_STRICT_VERSIONING = True
DEFAULT_CONFLICT_RETRIES = 2

# Node kinds (not configurable)
FOLDER_KIND = "folder"
LEAF_KIND = "leaf"
VALID_KINDS = [FOLDER_KIND, LEAF_KIND]

# Serialization modes (not configurable)
JSON_MODE = "json"
MARKDOWN_MODE = "markdown"
VALID_MODES = [JSON_MODE, MARKDOWN_MODE]

# Validation error messages (not configurable)
VALIDATION_TITLE_REQUIRED = "Title is required and cannot be blank."
VALIDATION_INVALID_KIND = f"Kind must be one of: {', '.join(VALID_KINDS)}."
VALIDATION_INVALID_MODE = f"Mode must be one of: {', '.join(VALID_MODES)}."


# =============================================================================
# Config Loader
# Load values from .arbor/config.json at runtime.
# =============================================================================

_config_manager_instance: Optional['ConfigManager'] = None


class ConfigManager:
    """
    Manages loading configuration from a config.json file with fallback to defaults.

    Usage:
        # With default path (.arbor/config.json)
        config = ConfigManager()
        cap = config.get_int('text_max_length', DEFAULT_TEXT_MAX_LENGTH)

        # With custom directory
        config = ConfigManager(arbor_dir=Path("/data/.arbor"))
    """

    def __init__(self, config_path: Optional[Path] = None, arbor_dir: Optional[Path] = None) -> None:
        """
        Initialize ConfigManager.

        Args:
            config_path: Direct path to config.json file. Takes precedence over arbor_dir.
            arbor_dir: Path to .arbor/ directory. Config path will be arbor_dir/config.json.
        """
        self._config: Optional[dict] = None

        if config_path is not None:
            self._config_path = config_path
        elif arbor_dir is not None:
            self._config_path = arbor_dir / "config.json"
        else:
            self._config_path = Path(DEFAULT_ARBOR_DIR) / "config.json"

    def _load_config(self) -> dict:
        """Load config from config.json file."""
        if self._config is not None:
            return self._config

        if self._config_path.exists():
            try:
                with open(self._config_path, "r") as f:
                    self._config = json.load(f)
            except (json.JSONDecodeError, IOError):
                self._config = {}
        else:
            self._config = {}

        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value with fallback to default.

        Args:
            key: Configuration key name.
            default: Default value if key not found.

        Returns:
            Config value or default.
        """
        config = self._load_config()
        return config.get(key, default)

    def get_int(self, key: str, default: int) -> int:
        """Get an integer config value with fallback."""
        value = self.get(key, default)
        return int(value) if value is not None else default

    def get_bool(self, key: str, default: bool) -> bool:
        """Get a boolean config value with fallback."""
        value = self.get(key, default)
        return bool(value) if value is not None else default

    def reload(self) -> dict:
        """Force reload of config from disk."""
        self._config = None
        return self._load_config()

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        return self._config_path


def get_config_manager(reset: bool = False) -> ConfigManager:
    """
    Get the singleton ConfigManager instance with default path.

    Args:
        reset: If True, reset the singleton and create a new instance.

    Returns:
        ConfigManager singleton instance.
    """
    global _config_manager_instance
    if _config_manager_instance is None or reset:
        _config_manager_instance = ConfigManager()
    return _config_manager_instance


def reset_config_manager() -> None:
    """Reset the singleton ConfigManager instance (useful for testing)."""
    global _config_manager_instance
    _config_manager_instance = None


# Convenience functions for common config access
# These use the singleton with default path (.arbor/config.json). ArborCore
# passes the values of its own store directory instead.
def get_text_max_length() -> int:
    """Get content text cap from config or default."""
    return get_config_manager().get_int('text_max_length', DEFAULT_TEXT_MAX_LENGTH)


def get_id_length() -> int:
    """Get generated id length from config or default."""
    return get_config_manager().get_int('id_length', DEFAULT_ID_LENGTH)


def get_default_indent_unit() -> int:
    """Get parser fallback indentation unit from config or default."""
    return get_config_manager().get_int('default_indent_unit', DEFAULT_INDENT_UNIT)


def get_export_indent() -> int:
    """Get markdown export indent width from config or default."""
    return get_config_manager().get_int('export_indent', DEFAULT_EXPORT_INDENT)
