"""
Settings management for the WDBX codec.
Handles loading, saving, and defaulting codec settings.
"""

import json
import os
import traceback
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from wdbx.constants import (
    CONFIG_FILE,
    DEFAULT_ENCODING,
    STRING_NOT_FOUND,
    TEMP_LOG_DIR,
)


@dataclass
class Settings:
    """Codec settings with default values."""

    log_dir: str = TEMP_LOG_DIR
    definitions_path: str = ""
    # Value substituted for string offsets missing from the string table
    string_not_found: str = STRING_NOT_FOUND
    encoding: str = DEFAULT_ENCODING
    # Write repeated WDB5 rows once and list the rest in the copy table
    dedupe_rows: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create Settings from dictionary."""
        # Filter out unknown keys
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered_data)


def get_default_settings() -> Dict[str, Any]:
    """Get default settings as a dictionary."""
    return Settings().to_dict()


def load_settings(config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load settings from config file.

    Args:
        config_file: Path to the JSON config (defaults to CONFIG_FILE)

    Returns:
        Dictionary of settings with defaults for missing values
    """
    path = config_file or CONFIG_FILE
    default_settings = get_default_settings()

    try:
        if os.path.exists(path):
            with open(path, "r") as f:
                loaded_settings = json.load(f)
                # Merge with defaults to handle new settings
                default_settings.update(loaded_settings)
    except (OSError, ValueError) as e:
        from wdbx.utils.logging import log_error

        log_error(
            "Failed to load settings, using defaults",
            type(e).__name__,
            traceback.format_exc(),
        )

    return default_settings


def save_settings(settings_to_save: Dict[str, Any], config_file: Optional[str] = None) -> bool:
    """
    Save settings to config file.

    Args:
        settings_to_save: Dictionary of settings to save
        config_file: Path to the JSON config (defaults to CONFIG_FILE)

    Returns:
        True if successful, False otherwise
    """
    path = config_file or CONFIG_FILE
    try:
        # Create directory if it doesn't exist
        config_dir = os.path.dirname(path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(path, "w") as f:
            json.dump(settings_to_save, f, indent=2)
        return True
    except OSError as e:
        from wdbx.utils.logging import log_error

        log_error("Failed to save settings", type(e).__name__, traceback.format_exc())
        return False
