"""
Configuration Management for Receipt Splitter

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Room limits, recognition backend choice and display options are
validated once at startup instead of being scattered as literals.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RoomSettings(BaseSettings):
    """Limits and defaults for a single room."""

    model_config = SettingsConfigDict(
        env_prefix="ROOM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    min_members: int = Field(
        default=1,
        ge=1,
        description="A room always keeps at least this many members"
    )
    max_members: int = Field(
        default=7,
        ge=1,
        le=50,
        description="Maximum number of members in a room"
    )
    max_member_name_length: int = Field(
        default=30,
        ge=1,
        description="Maximum member name length after trimming"
    )
    default_members: str = Field(
        default="Alex,Sam,Riley",
        description="Comma-separated initial membership of a new room"
    )
    room_name_min_length: int = Field(default=2, ge=1)
    room_name_max_length: int = Field(default=30, ge=1)
    pin_length: int = Field(
        default=4,
        ge=1,
        le=12,
        description="Number of digits in a room PIN"
    )

    @field_validator('max_members')
    @classmethod
    def validate_max_members(cls, v: int, info) -> int:
        """Maximum cannot be below the floor."""
        min_members = info.data.get("min_members", 1)
        if v < min_members:
            raise ValueError(
                f"max_members ({v}) cannot be lower than min_members ({min_members})"
            )
        return v

    @property
    def default_members_list(self) -> list[str]:
        """Get default members as a list, blanks and duplicates dropped."""
        members = []
        for name in self.default_members.split(","):
            name = name.strip()
            if name and name not in members:
                members.append(name)
        return members


class RecognitionSettings(BaseSettings):
    """Receipt recognition backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RECOGNITION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="mock",
        pattern="^(mock|mindee)$",
        description="Which recognizer to use"
    )
    mock_latency_seconds: float = Field(
        default=1.2,
        ge=0.0,
        le=30.0,
        description="Simulated latency of the placeholder recognizer"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made against the remote recognition API"
    )


class MindeeSettings(BaseSettings):
    """Mindee receipt API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MINDEE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Mindee API key"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt image size in MB"
    )
    supported_image_formats: str = Field(
        default="jpg,jpeg,png,webp,heic",
        description="Comma-separated list of supported image formats"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Symbol shown in front of amounts"
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: Optional[str]) -> str:
        if v is None:
            return "INFO"
        return str(v).strip().upper()

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: sub-settings are loaded lazily so the mock backend works
    # without any Mindee credentials.

    @property
    def room(self) -> RoomSettings:
        return RoomSettings()

    @property
    def recognition(self) -> RecognitionSettings:
        return RecognitionSettings()

    @property
    def mindee(self) -> MindeeSettings:
        return MindeeSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry describing each failure.
    Mindee is only required when it is the selected backend.
    """
    results = {}

    settings = get_settings()

    sections = {
        "room": lambda: settings.room,
        "recognition": lambda: settings.recognition,
        "app": lambda: settings.app,
    }

    try:
        needs_mindee = settings.recognition.backend == "mindee"
    except Exception:
        needs_mindee = False
    if needs_mindee:
        sections["mindee"] = lambda: settings.mindee

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
