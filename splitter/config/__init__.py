"""Configuration package."""

from splitter.config.settings import (
    AppSettings,
    MindeeSettings,
    RecognitionSettings,
    RoomSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "MindeeSettings",
    "RecognitionSettings",
    "RoomSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
