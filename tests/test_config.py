"""Tests for pydantic-settings based configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest import mock

import pytest
from pydantic import ValidationError

from shelfmark.analytics import FreezePolicy, PaceWindow
from shelfmark.config import (
    AnalyticsSettings,
    AppSettings,
    GoogleBooksSettings,
    OpenLibrarySettings,
    ResolverSettings,
    clear_settings_cache,
    default_env_file,
    get_settings,
    load_settings,
)
from shelfmark.exceptions import ConfigurationError


class TestGoogleBooksSettings:
    """Tests for Google Books settings."""

    def test_default_values(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = GoogleBooksSettings()
            assert settings.base_url == "https://www.googleapis.com/books/v1"
            assert settings.api_key == ""
            assert settings.max_results == 15

    def test_loads_from_env(self) -> None:
        env = {
            "GOOGLE_BOOKS_API_KEY": "k-123",
            "GOOGLE_BOOKS_TIMEOUT_SECONDS": "4.5",
            "GOOGLE_BOOKS_MAX_RESULTS": "40",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = GoogleBooksSettings()
            assert settings.api_key == "k-123"
            assert settings.timeout_seconds == 4.5
            assert settings.max_results == 40

    def test_validates_base_url(self) -> None:
        env = {"GOOGLE_BOOKS_BASE_URL": "www.googleapis.com/books/v1"}
        with (
            mock.patch.dict(os.environ, env, clear=True),
            pytest.raises(ValueError, match="must start with http://"),
        ):
            GoogleBooksSettings()

    def test_strips_trailing_slash(self) -> None:
        env = {"GOOGLE_BOOKS_BASE_URL": "http://localhost:9000/books/v1/"}
        with mock.patch.dict(os.environ, env, clear=True):
            assert GoogleBooksSettings().base_url == "http://localhost:9000/books/v1"

    def test_max_results_bounded(self) -> None:
        with (
            mock.patch.dict(os.environ, {"GOOGLE_BOOKS_MAX_RESULTS": "41"}, clear=True),
            pytest.raises(ValidationError),
        ):
            GoogleBooksSettings()


class TestOpenLibrarySettings:
    def test_covers_url_validated(self) -> None:
        env = {"OPEN_LIBRARY_COVERS_URL": "ftp://covers.example"}
        with (
            mock.patch.dict(os.environ, env, clear=True),
            pytest.raises(ValueError, match="must start with http://"),
        ):
            OpenLibrarySettings()

    def test_loads_from_env(self) -> None:
        env = {"OPEN_LIBRARY_BASE_URL": "http://ol.local/", "OPEN_LIBRARY_SEARCH_LIMIT": "5"}
        with mock.patch.dict(os.environ, env, clear=True):
            settings = OpenLibrarySettings()
            assert settings.base_url == "http://ol.local"
            assert settings.search_limit == 5


class TestResolverAndAnalyticsSettings:
    def test_resolver_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = ResolverSettings()
            assert (
                settings.author_only_threshold,
                settings.query_only_threshold,
                settings.fallback_threshold,
            ) == (10, 5, 3)

    def test_resolver_from_env(self) -> None:
        with mock.patch.dict(os.environ, {"SHELFMARK_RESOLVER_FALLBACK_THRESHOLD": "0"}):
            assert ResolverSettings().fallback_threshold == 0

    def test_analytics_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = AnalyticsSettings()
            assert settings.freeze_policy is FreezePolicy.CALENDAR_WEEK
            assert settings.freezes_per_week == 1
            assert settings.auto_freeze is False
            assert settings.pace_window is PaceWindow.RECENT

    def test_analytics_from_env(self) -> None:
        env = {
            "SHELFMARK_ANALYTICS_FREEZE_POLICY": "rolling_week",
            "SHELFMARK_ANALYTICS_AUTO_FREEZE": "true",
            "SHELFMARK_ANALYTICS_PACE_WINDOW": "span",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = AnalyticsSettings()
            assert settings.freeze_policy is FreezePolicy.ROLLING_WEEK
            assert settings.auto_freeze is True
            assert settings.pace_window is PaceWindow.SPAN

    def test_unknown_policy_rejected(self) -> None:
        with (
            mock.patch.dict(os.environ, {"SHELFMARK_ANALYTICS_FREEZE_POLICY": "monthly"}),
            pytest.raises(ValidationError),
        ):
            AnalyticsSettings()


class TestAppSettings:
    def test_log_level_normalized(self) -> None:
        with mock.patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            assert AppSettings().log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with (
            mock.patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}, clear=True),
            pytest.raises(ValueError, match="LOG_LEVEL must be one of"),
        ):
            AppSettings()

    def test_log_to_file(self) -> None:
        with mock.patch.dict(os.environ, {"SHELFMARK_LOG_TO_FILE": "1"}, clear=True):
            assert AppSettings().log_to_file is True


class TestGetSettings:
    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_clear_cache(self) -> None:
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first

    def test_invalid_environment(self) -> None:
        with (
            mock.patch.dict(os.environ, {"GOOGLE_BOOKS_BASE_URL": "nope"}),
            pytest.raises(ConfigurationError, match="Invalid environment settings"),
        ):
            get_settings()


class TestLoadSettings:
    """Tests for YAML overlay loading."""

    def test_no_file_uses_environment(self) -> None:
        with mock.patch.dict(os.environ, {"GOOGLE_BOOKS_API_KEY": "from-env"}):
            assert load_settings().google_books.api_key == "from-env"

    def test_yaml_overrides_environment(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text(
            "google_books:\n"
            "  api_key: from-yaml\n"
            "analytics:\n"
            "  freeze_policy: rolling_week\n"
            "  freezes_per_week: 2\n"
            "resolver:\n"
            "  fallback_threshold: 1\n",
            encoding="utf-8",
        )
        with mock.patch.dict(os.environ, {"GOOGLE_BOOKS_API_KEY": "from-env"}):
            settings = load_settings(config)

        assert settings.google_books.api_key == "from-yaml"
        assert settings.analytics.freeze_policy is FreezePolicy.ROLLING_WEEK
        assert settings.analytics.freezes_per_week == 2
        assert settings.resolver.fallback_threshold == 1
        # Untouched sections keep defaults
        assert settings.resolver.author_only_threshold == 10

    def test_empty_file(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("", encoding="utf-8")
        assert load_settings(config).covers.memory_capacity == 50

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read config file"):
            load_settings(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("google_books: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_settings(config)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_settings(config)

    def test_section_not_a_mapping(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("resolver: 5\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(config)
        assert exc_info.value.field == "resolver"

    def test_invalid_value(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("covers:\n  memory_capacity: 0\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid 'covers' settings"):
            load_settings(config)

    def test_unknown_sections_warned(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("sessions:\n  timer: true\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="shelfmark.config"):
            load_settings(config)
        assert "sessions" in caplog.text

    def test_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("GOOGLE_BOOKS_API_KEY=dotenv-key\n", encoding="utf-8")
        with mock.patch.dict(os.environ, {}):
            os.environ.pop("GOOGLE_BOOKS_API_KEY", None)
            assert load_settings(env_file=env_file).google_books.api_key == "dotenv-key"

    def test_environment_wins_over_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("GOOGLE_BOOKS_API_KEY=dotenv-key\n", encoding="utf-8")
        with mock.patch.dict(os.environ, {"GOOGLE_BOOKS_API_KEY": "shell-key"}):
            assert load_settings(env_file=env_file).google_books.api_key == "shell-key"


class TestDefaultEnvFile:
    """Tests for locating the .env file."""

    def test_next_to_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("", encoding="utf-8")
        config_dir = tmp_path / "conf"
        config_dir.mkdir()
        (config_dir / ".env").write_text("", encoding="utf-8")

        assert default_env_file(config_dir / "config.yaml") == (config_dir / ".env").resolve()

    def test_falls_back_to_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("", encoding="utf-8")

        assert default_env_file(tmp_path / "conf" / "config.yaml") == Path(".env")
        assert default_env_file() == Path(".env")

    def test_none_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert default_env_file(tmp_path / "config.yaml") is None
