"""Unit tests for the error hierarchy, timestamp helpers and configuration."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from importlib.resources import files
from unittest.mock import MagicMock

import pytest

from soniccompass.api.middleware import handle_application_error
from soniccompass.config.loader import load_config
from soniccompass.config.settings import Settings
from soniccompass.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    GeocodingError,
    LLMResponseError,
    NotFoundError,
    ProviderResponseError,
    SessionNotFoundError,
    SonicCompassError,
    TransientNetworkError,
    UserInputError,
)
from soniccompass.utils.timefmt import date_window, utc_timestamp


# ======================================================================
# Errors
# ======================================================================


class TestErrorHierarchy:
    def test_str_prefixes_provider(self) -> None:
        assert str(GeocodingError("HTTP 403", provider_name="opencage")) == "[opencage] HTTP 403"
        assert str(UserInputError("nothing to do")) == "nothing to do"

    def test_all_inherit_from_base(self) -> None:
        for cls in (ConfigurationError, UserInputError, NotFoundError, TransientNetworkError):
            assert issubclass(cls, SonicCompassError)
        assert issubclass(LLMResponseError, ProviderResponseError)
        assert issubclass(SessionNotFoundError, NotFoundError)

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (UserInputError(), 400),
            (AuthenticationError(), 401),
            (NotFoundError(), 404),
            (SessionNotFoundError("abc"), 404),
            (GeocodingError(), 502),
            (LLMResponseError(), 502),
            (ConfigurationError(), 503),
            (SonicCompassError(), 500),
        ],
    )
    def test_status_codes(self, error: SonicCompassError, status: int) -> None:
        assert error.status_code == status

    def test_transient_error_keeps_status(self) -> None:
        exc = TransientNetworkError("HTTP 429: slow down", status=429)
        assert exc.status == 429
        assert TransientNetworkError("reset").status is None

    def test_session_not_found_message(self) -> None:
        assert SessionNotFoundError("abc").message == "Session not found: abc"


# ======================================================================
# Timestamps
# ======================================================================


class TestTimestamps:
    def test_truncates_fraction(self) -> None:
        dt = datetime(2025, 3, 1, 12, 30, 45, 999999, tzinfo=timezone.utc)
        assert utc_timestamp(dt) == "2025-03-01T12:30:45Z"

    def test_converts_offset_to_utc(self) -> None:
        eastern = timezone(timedelta(hours=-5))
        dt = datetime(2025, 3, 1, 20, 0, 0, tzinfo=eastern)
        assert utc_timestamp(dt) == "2025-03-02T01:00:00Z"

    def test_naive_is_utc(self) -> None:
        assert utc_timestamp(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03:04:05Z"

    def test_window_is_exact_days(self, fixed_now) -> None:
        start, end = date_window(fixed_now, 60)
        assert start == "2025-03-01T12:30:45Z"
        assert end == "2025-04-30T12:30:45Z"


# ======================================================================
# Settings and config loader
# ======================================================================


class TestSettings:
    def test_defaults_without_env_file(self, monkeypatch) -> None:
        for name in ("GEMINI_API_KEY", "OPENAI_API_KEY", "CORS_ORIGINS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.gemini_model == "gemini-2.0-flash"
        assert settings.http_max_retries == 2
        assert settings.http_backoff_seconds == 1.0
        assert settings.get_available_song_generators() == []
        assert settings.get_cors_origins() == []

    def test_song_generator_priority(self) -> None:
        settings = Settings(_env_file=None, gemini_api_key="g", openai_api_key="o")
        assert settings.get_available_song_generators() == ["gemini", "openai"]
        only_openai = Settings(_env_file=None, gemini_api_key="", openai_api_key="o")
        assert only_openai.get_available_song_generators() == ["openai"]

    def test_cors_origins_split(self) -> None:
        settings = Settings(
            _env_file=None, cors_origins=" http://a.test , ,http://b.test"
        )
        assert settings.get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_env_var_override(self, monkeypatch) -> None:
        monkeypatch.setenv("TICKETMASTER_API_KEY", "tm-from-env")
        assert Settings(_env_file=None).ticketmaster_api_key == "tm-from-env"


class TestLoadConfig:
    def test_repository_config(self) -> None:
        config = load_config(settings=Settings(_env_file=None))
        assert config["search"]["default_city"] == "Spartanburg"
        assert config["search"]["date_windows"] == [30, 60, 90]
        assert config["genres"][0] == {"value": "", "label": "All Genres"}
        assert config["playlist"]["title_prefix"] == "SonicCompass Hype"

    def test_packaged_config_found_from_any_directory(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = load_config(settings=Settings(_env_file=None))

        assert [g["value"] for g in config["genres"]][:3] == ["", "Rock", "Pop"]
        assert config["playlist"]["description"]

    def test_yaml_ships_inside_the_package(self) -> None:
        resource = files("soniccompass.config").joinpath("config.yaml")
        assert resource.is_file()

    def test_env_values_merged_over_yaml(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "app:\n  name: custom\n  port: 1\nhttp:\n  timeout_seconds: 99\n"
        )
        settings = Settings(_env_file=None, app_port=9000, opencage_api_key="oc")
        config = load_config(path, settings=settings)

        assert config["app"]["name"] == "custom"
        assert config["app"]["port"] == 9000
        assert config["http"]["timeout_seconds"] == settings.http_timeout_seconds
        assert config["providers"]["geocoding"] is True

    def test_missing_file_yields_env_only(self, tmp_path) -> None:
        config = load_config(tmp_path / "absent.yaml", settings=Settings(_env_file=None))
        assert "search" not in config
        assert config["logging"]["level"] == Settings(_env_file=None).log_level


# ======================================================================
# API error handler
# ======================================================================


class TestErrorHandler:
    @pytest.mark.asyncio
    async def test_renders_application_error(self) -> None:
        response = await handle_application_error(MagicMock(), NotFoundError("gone"))
        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "NotFoundError", "detail": "gone"}

    @pytest.mark.asyncio
    async def test_other_exceptions_are_reraised(self) -> None:
        with pytest.raises(RuntimeError, match="boom"):
            await handle_application_error(MagicMock(), RuntimeError("boom"))
