"""Configuration exports."""

from shellfix.config.loader import (
    ConfigLoadError,
    create_default_settings_file,
    load_settings,
    settings_path,
)
from shellfix.config.settings import (
    ConfigValidationError,
    ConfigValidationIssue,
    Settings,
    validate_settings,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "Settings",
    "create_default_settings_file",
    "load_settings",
    "settings_path",
    "validate_settings",
]
