"""Query-grid configuration loaded from environment variables."""

from __future__ import annotations

import logging
import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_CAST_TYPE_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables with QUERY_GRID_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="QUERY_GRID_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    debug: bool = False

    # Logging
    structured_logging: bool = False

    # Metadata cache
    metadata_cache_enabled: bool = True
    metadata_cache_max_entries: int = Field(default=256, ge=1)

    # Mutation synthesis
    json_cast: str = "jsonb"

    @field_validator("json_cast")
    @classmethod
    def validate_json_cast(cls, v: str) -> str:
        # Appended verbatim after '::', so it must be a bare type name.
        if not _CAST_TYPE_RE.match(v):
            raise ValueError(f"json_cast must be a bare type name, got {v!r}")
        return v


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info(
            "Loaded settings: json_cast=%s, metadata cache %s (max %d)",
            settings.json_cast,
            "on" if settings.metadata_cache_enabled else "off",
            settings.metadata_cache_max_entries,
        )

    return settings
