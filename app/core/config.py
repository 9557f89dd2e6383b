"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename
_env_file = str(_env_path) if _env_path.is_file() else None

# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
# Tests set TESTING=true to keep developer .env files out of the run.
if _env_file and os.getenv("TESTING", "").lower() != "true":
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    BaseSettings reads its fields from the environment; the type ignore keeps
    static checkers from treating required fields as constructor arguments.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


def _build_supabase_settings() -> "SupabaseSettings":
    return SupabaseSettings()  # type: ignore[call-arg]


def _build_storage_settings() -> "StorageSettings":
    return StorageSettings()  # type: ignore[call-arg]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    backend_provider: str = Field(
        "supabase",
        description="Data/auth backend: 'supabase' for the hosted project, 'memory' for local runs",
    )
    cors_origins: str | None = Field(
        None,
        description="Comma-separated list of origins allowed to call the API",
    )

    login_rate_limit_enabled: bool = Field(
        True,
        description="Throttle failed login attempts per IP+email",
    )
    login_max_attempts: int = Field(
        5,
        description="Failed attempts allowed per window before the key is blocked",
        ge=1,
    )
    login_window_seconds: int = Field(
        15 * 60,
        description="Window in which failed attempts are counted",
        ge=1,
    )
    login_block_seconds: int = Field(
        15 * 60,
        description="How long a key stays blocked after reaching the attempt limit",
        ge=1,
    )

    query_cache_enabled: bool = Field(
        True,
        description="Cache read endpoints in process memory",
    )
    query_cache_ttl_seconds: int = Field(
        30,
        description="Time-to-live of cached query results",
        ge=1,
    )
    query_cache_max_entries: int = Field(
        512,
        description="Maximum number of cached query results",
        ge=1,
    )

    max_apk_size_mb: int = Field(
        200,
        description="Maximum APK upload size in megabytes",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10 * 1024 * 1024, description="Rotate the log file at this size (0 disables)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Header carrying the correlation id")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class SupabaseSettings(BaseSettings):
    """Hosted backend (Supabase) connection settings."""

    url: str | None = Field(None, description="Project URL, e.g. https://xyz.supabase.co")
    anon_key: str | None = Field(None, description="Public anon key used for password sign-in")
    service_role_key: str | None = Field(
        None,
        description="Service role key used for table access and the admin auth API",
    )

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        case_sensitive=False,
    )


class StorageSettings(BaseSettings):
    """Object storage (Bunny Storage) settings for APK distribution."""

    storage_zone: str | None = Field(None, description="Storage zone name")
    storage_password: str | None = Field(None, description="Storage zone password (AccessKey)")
    storage_region: str = Field("", description="Region prefix, empty for the main region")
    pull_zone: str | None = Field(None, description="Pull zone name serving the CDN URL")
    apk_filename_prefix: str = Field("scanstock", description="Uploaded files are named {prefix}-v{version}.apk")
    timeout_seconds: float = Field(120.0, description="Storage request timeout in seconds")

    model_config = SettingsConfigDict(
        env_prefix="BUNNY_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    supabase: SupabaseSettings = Field(default_factory=_build_supabase_settings)
    storage: StorageSettings = Field(default_factory=_build_storage_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
