"""Config validation – errors raised while loading or checking relay options."""
from __future__ import annotations

from mp_relay.kernel.errors import ApplicationError


def _qualified(setting_name: str, owner: str | None) -> str:
    return f"{owner}.{setting_name}" if owner else setting_name


class ConfigError(ApplicationError):
    """Relay options could not be loaded or failed validation."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A setting without a default has no value, e.g. an unset ``RELAY_*`` variable."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str, *, owner: str | None = None) -> None:
        super().__init__(
            f"Setting '{_qualified(setting_name, owner)}' has no default and was not provided"
        )
        self.setting_name = setting_name
        self.owner = owner


class InvalidSettingValueError(ConfigError):
    """A setting is present but unusable.

    Raised at construction for bad options (an empty table name, a
    non-positive ``non_graceful_retry_delay``) and by the loaders when an
    environment value cannot be coerced. The inbox queue raises it again
    from ``begin`` before touching the store.
    """
    default_code = "invalid_setting_value"

    def __init__(
        self,
        setting_name: str,
        value: object,
        reason: str,
        *,
        owner: str | None = None,
    ) -> None:
        super().__init__(
            f"Setting '{_qualified(setting_name, owner)}' has invalid value {value!r}: {reason}"
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason
        self.owner = owner


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
