"""
Configuration settings for xpstools.

Settings are read from environment variables prefixed with ``XPSTOOLS_``
or from a ``.env`` file in the working directory.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Name of the canvas that holds generated annotations on a page
OVERLAY_LAYER_NAME = "_Annotations_"

# Zip deflate level used for written packages
MAX_COMPRESSION_LEVEL = 9


class Settings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="XPSTOOLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Fonts
    default_font_family: str = Field(
        default="Arial",
        description="Font family used when an annotation does not name one"
    )
    fallback_font_family: str = Field(
        default="DejaVu Sans",
        description="Family tried when the requested family cannot be found"
    )
    font_dirs: List[Path] = Field(
        default_factory=list,
        description="Extra directories scanned for .ttf/.otf files"
    )

    # Output
    compression_level: int = Field(
        default=MAX_COMPRESSION_LEVEL,
        ge=0,
        le=9,
        description="Deflate level for written packages"
    )
    intermediate_suffix: str = Field(
        default=".temp",
        description="Suffix appended to the destination path for the intermediate package"
    )

    # Application settings
    log_level: str = Field(default="INFO")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
