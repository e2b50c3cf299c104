"""Configuration – settings dataclasses, loaders and validation errors."""
from mp_relay.config.settings import DotenvSettingsLoader, EnvSettingsLoader, Settings, SettingsLoader
from mp_relay.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
