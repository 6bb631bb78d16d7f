"""Settings for shelfmark using pydantic-settings.

Settings come from three places, highest priority first:

1. ``config.yaml`` (optional, see ``load_settings``). Top-level sections match
   the nested settings below: ``google_books``, ``open_library``, ``resolver``,
   ``analytics``, ``covers``, ``app``.
2. Environment variables, plus a ``.env`` file (see ``default_env_file``).
   Variables already set win over the file.
3. Defaults.

Environment Variables:
    Google Books (primary catalog):
        GOOGLE_BOOKS_BASE_URL - API base (default: "https://www.googleapis.com/books/v1")
        GOOGLE_BOOKS_API_KEY - Optional API key
        GOOGLE_BOOKS_TIMEOUT_SECONDS, GOOGLE_BOOKS_MAX_RESULTS, GOOGLE_BOOKS_MAX_RETRIES

    Open Library (secondary catalog):
        OPEN_LIBRARY_BASE_URL - API base (default: "https://openlibrary.org")
        OPEN_LIBRARY_COVERS_URL - Cover host (default: "https://covers.openlibrary.org")
        OPEN_LIBRARY_TIMEOUT_SECONDS, OPEN_LIBRARY_SEARCH_LIMIT, OPEN_LIBRARY_MAX_RETRIES

    Resolver:
        SHELFMARK_RESOLVER_AUTHOR_ONLY_THRESHOLD (10)
        SHELFMARK_RESOLVER_QUERY_ONLY_THRESHOLD (5)
        SHELFMARK_RESOLVER_FALLBACK_THRESHOLD (3)

    Analytics:
        SHELFMARK_ANALYTICS_FREEZE_POLICY - "calendar_week" or "rolling_week"
        SHELFMARK_ANALYTICS_FREEZES_PER_WEEK - Freeze allowance (default: 1)
        SHELFMARK_ANALYTICS_AUTO_FREEZE - Spend unused allowance on missed days
        SHELFMARK_ANALYTICS_PACE_WINDOW - "recent" or "span"

    Covers:
        SHELFMARK_COVERS_MEMORY_CAPACITY - In-memory cover entries (default: 50)
        SHELFMARK_COVERS_DIRECTORY - Disk tier location (default: platformdirs cache)

    Application:
        SHELFMARK_ENV - Environment name (default: "production")
        LOG_LEVEL - Logging level (default: "INFO")
        SHELFMARK_LOG_TO_FILE - Write DEBUG logs to <log dir>/shelfmark.log
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shelfmark.analytics.pace import PaceWindow
from shelfmark.analytics.streaks import FreezePolicy
from shelfmark.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _validate_url_field(v: str, field_name: str) -> str:
    """Validate URL format (shared validator).

    Args:
        v: The URL value to validate.
        field_name: Name of the field for error messages.

    Returns:
        The validated URL with trailing slash stripped.

    Raises:
        ValueError: If URL doesn't start with http:// or https://.
    """
    if v and not v.startswith(("http://", "https://")):
        raise ValueError(f"{field_name} must start with http:// or https://, got: {v}")
    return v.rstrip("/") if v else v


class GoogleBooksSettings(BaseSettings):
    """Google Books volumes API settings (GOOGLE_BOOKS_* env vars)."""

    model_config = SettingsConfigDict(env_prefix="GOOGLE_BOOKS_", extra="ignore")

    base_url: str = Field(
        default="https://www.googleapis.com/books/v1", description="Google Books API base URL"
    )
    api_key: str = Field(default="", description="Optional Google Books API key")
    timeout_seconds: float = Field(default=15.0, gt=0)
    max_results: int = Field(default=15, ge=1, le=40)
    max_retries: int = Field(default=2, ge=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate Google Books base URL format."""
        return _validate_url_field(v, "GOOGLE_BOOKS_BASE_URL")


class OpenLibrarySettings(BaseSettings):
    """Open Library API settings (OPEN_LIBRARY_* env vars)."""

    model_config = SettingsConfigDict(env_prefix="OPEN_LIBRARY_", extra="ignore")

    base_url: str = Field(default="https://openlibrary.org")
    covers_url: str = Field(default="https://covers.openlibrary.org")
    timeout_seconds: float = Field(default=15.0, gt=0)
    search_limit: int = Field(default=20, ge=1, le=100)
    max_retries: int = Field(default=2, ge=0)

    @field_validator("base_url", "covers_url")
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Validate Open Library URL format."""
        return _validate_url_field(v, "OPEN_LIBRARY URL")


class ResolverSettings(BaseSettings):
    """Result-count thresholds that gate each resolver step."""

    model_config = SettingsConfigDict(env_prefix="SHELFMARK_RESOLVER_", extra="ignore")

    author_only_threshold: int = Field(default=10, ge=0)
    query_only_threshold: int = Field(default=5, ge=0)
    fallback_threshold: int = Field(default=3, ge=0)


class AnalyticsSettings(BaseSettings):
    """Streak freeze and pace settings."""

    model_config = SettingsConfigDict(env_prefix="SHELFMARK_ANALYTICS_", extra="ignore")

    freeze_policy: FreezePolicy = FreezePolicy.CALENDAR_WEEK
    freezes_per_week: int = Field(default=1, ge=0)
    auto_freeze: bool = Field(
        default=False,
        description="Spend unused weekly allowance on missed days while counting streaks",
    )
    pace_window: PaceWindow = PaceWindow.RECENT


class CoverCacheSettings(BaseSettings):
    """Cover image cache settings."""

    model_config = SettingsConfigDict(env_prefix="SHELFMARK_COVERS_", extra="ignore")

    memory_capacity: int = Field(default=50, ge=1)
    directory: Path | None = None


class AppSettings(BaseSettings):
    """Application-level settings (SHELFMARK_ENV, LOG_LEVEL, SHELFMARK_LOG_TO_FILE)."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    env: str = Field(default="production", validation_alias="SHELFMARK_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_to_file: bool = Field(
        default=False,
        validation_alias="SHELFMARK_LOG_TO_FILE",
        description="Also write DEBUG logs to a rotating file in the log directory",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got: {v}")
        return upper


class Settings(BaseSettings):
    """Combined settings.

    Use get_settings() for a cached instance, or load_settings() to overlay a
    YAML config file.

    Example:
        settings = get_settings()
        print(settings.google_books.base_url)
        print(settings.analytics.freeze_policy)
    """

    model_config = SettingsConfigDict(extra="ignore")

    google_books: GoogleBooksSettings = Field(default_factory=GoogleBooksSettings)
    open_library: OpenLibrarySettings = Field(default_factory=OpenLibrarySettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    covers: CoverCacheSettings = Field(default_factory=CoverCacheSettings)
    app: AppSettings = Field(default_factory=AppSettings)


_SECTIONS: dict[str, type[BaseSettings]] = {
    "google_books": GoogleBooksSettings,
    "open_library": OpenLibrarySettings,
    "resolver": ResolverSettings,
    "analytics": AnalyticsSettings,
    "covers": CoverCacheSettings,
    "app": AppSettings,
}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings built from environment variables and defaults."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment settings: {e}") from e


def clear_settings_cache() -> None:
    """Clear the cached settings (useful in tests)."""
    get_settings.cache_clear()


def default_env_file(config_file: Path | str | None = None) -> Path | None:
    """The ``.env`` next to ``config_file``, else one in the working directory.

    Returns None when neither exists.
    """
    candidates = [Path(".env")]
    if config_file is not None:
        candidates.insert(0, Path(config_file).resolve().parent / ".env")
    return next((p for p in candidates if p.is_file()), None)


def load_settings(config_file: Path | str | None = None, env_file: Path | None = None) -> Settings:
    """Build settings with an optional YAML file overlaid on the environment.

    Args:
        config_file: Path to config.yaml. Missing file is an error only when
            given explicitly.
        env_file: Optional .env file loaded into the environment first. Variables
            that are already set keep their values.

    Returns:
        Settings instance (not cached).

    Raises:
        ConfigurationError: If the file is unreadable, not a mapping, or fails validation.
    """
    if env_file is not None:
        from dotenv import load_dotenv

        load_dotenv(env_file)

    data: dict[str, Any] = {}
    if config_file is not None:
        path = Path(config_file)
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file: {e}", config_file=path) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", config_file=path) from e
        if not isinstance(loaded, dict):
            raise ConfigurationError("Config file must contain a mapping", config_file=path)
        data = loaded

    sections: dict[str, Any] = {}
    for name, cls in _SECTIONS.items():
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"Section '{name}' must be a mapping", config_file=config_file, field=name
            )
        try:
            # Init kwargs take priority over env vars in pydantic-settings
            sections[name] = cls(**section)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid '{name}' settings: {e}", config_file=config_file, field=name
            ) from e

    unknown = set(data) - set(_SECTIONS)
    if unknown:
        logger.warning("Ignoring unknown config sections: %s", ", ".join(sorted(unknown)))

    return Settings(**sections)
