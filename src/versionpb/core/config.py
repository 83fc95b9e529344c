"""Environment configuration for versionpb.

Values are loaded from environment variables or a local `.env` file. List
values use JSON, e.g. `VERSIONPB_EXCLUDED_PACKAGES='["google.protobuf"]'`.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from versionpb.tags import DEFAULT_TAG_NAMES


class VersionpbSettings(BaseSettings):
    """Top-level configuration container for versionpb tooling."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        frozen=True,
        extra="ignore",
    )

    # Marker names in priority order: message, field, enum, enum value.
    tag_names: tuple[str, ...] = Field(
        alias="VERSIONPB_TAG_NAMES", default=DEFAULT_TAG_NAMES
    )
    excluded_packages: tuple[str, ...] = Field(
        alias="VERSIONPB_EXCLUDED_PACKAGES", default=()
    )
    log_level: str = Field(alias="VERSIONPB_LOG_LEVEL", default="INFO")

    @field_validator("tag_names")
    @classmethod
    def _check_tag_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one tag name is required")
        if any(not name for name in value):
            raise ValueError("tag names must be non-empty")
        return value


__all__ = ["VersionpbSettings"]
