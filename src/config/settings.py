"""
Application Settings - Pydantic Settings for configuration management.

Supports environment variables and .env file loading.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BeforeValidator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_to_uppercase(v: str) -> str:
    """Normalize string to uppercase."""
    if isinstance(v, str):
        return v.upper()
    return v


class StoreSettings(BaseSettings):
    """Project data directory settings."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    base_dir: Path = Field(default=Path(".zeus"), description="Root directory of the entity YAML files")


class IntegritySettings(BaseSettings):
    """Integrity checker settings."""

    model_config = SettingsConfigDict(env_prefix="INTEGRITY_")

    fold_parent_into_dependencies: bool = Field(
        default=True,
        description="Treat an activity's parent pointer as an extra dependency edge "
                    "when searching for dependency cycles",
    )
    log_findings: bool = Field(
        default=False,
        description="Log every reference finding at debug level",
    )


class ObservabilitySettings(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="OBSERVABILITY_")

    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format (json for machines, console for terminals)"
    )


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Zeus Integrity", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )
    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"],
        BeforeValidator(normalize_to_uppercase),
    ] = Field(default="INFO", description="Logging level")

    # Sub-settings
    store: StoreSettings = Field(default_factory=StoreSettings)
    integrity: IntegritySettings = Field(default_factory=IntegritySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
