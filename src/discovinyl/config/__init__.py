"""Configuration module for the vinyl catalog."""

from .settings import (
    AuthSettings,
    CacheSettings,
    MusicBrainzSettings,
    ObservabilitySettings,
    Settings,
    SheetsSettings,
    get_settings,
)

__all__ = [
    "AuthSettings",
    "CacheSettings",
    "MusicBrainzSettings",
    "ObservabilitySettings",
    "Settings",
    "SheetsSettings",
    "get_settings",
]
