"""flowport configuration.

The CLI builds its stores and services from `get_settings()`; tests swap
in their own instance with `set_settings()`.
"""

from flowport.config.settings import Settings

_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, reading FLOWPORT_* variables on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Install `settings` as the process-wide instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Drop the cached instance so the environment is read again."""
    global _settings
    _settings = None


__all__ = ["Settings", "get_settings", "set_settings", "reset_settings"]
