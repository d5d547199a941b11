"""Unit tests for settings models and loader."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from itinerary_pipeline.commons.settings.loader import (
    SettingsLoader,
    _coerce_value,
    _deep_merge,
    get_settings,
    reset_settings,
)
from itinerary_pipeline.commons.settings.models import (
    AppSettings,
    ContinuationSettings,
    DocumentDBSettings,
    PipelineSettings,
    ServerSettings,
    Settings,
    TelemetrySettings,
    VideoAISettings,
    YouTubeSettings,
)


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.name == "itinerary-pipeline"
        assert settings.environment == "dev"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="invalid")  # type: ignore[arg-type]


class TestServerSettings:
    """Tests for ServerSettings model."""

    def test_default_values(self):
        settings = ServerSettings()
        assert settings.port == 8000
        assert settings.api_prefix == "/v1"

    def test_port_validation(self):
        with pytest.raises(ValueError):
            ServerSettings(port=0)

        with pytest.raises(ValueError):
            ServerSettings(port=70000)


class TestPipelineSettings:
    """Tests for PipelineSettings model."""

    def test_default_values(self):
        settings = PipelineSettings()
        assert settings.chunk_seconds == 300
        assert settings.default_chunk_seconds is None
        assert settings.max_execution_seconds == 120
        assert settings.chunk_delay_seconds == 1.5
        assert settings.extract_progress_start == 30
        assert settings.extract_progress_end == 80

    def test_budget_must_be_positive(self):
        with pytest.raises(ValueError):
            PipelineSettings(max_execution_seconds=0)

    def test_progress_range_ordered(self):
        with pytest.raises(ValueError, match="extract_progress_start"):
            PipelineSettings(extract_progress_start=90, extract_progress_end=80)


class TestProviderSettings:
    """Tests for provider settings models."""

    def test_video_ai_defaults(self):
        settings = VideoAISettings()
        assert settings.model == "gemini-2.5-flash"
        assert settings.max_retries == 3
        assert settings.retry_delay_seconds == 2.0

    def test_video_ai_retry_bounds(self):
        with pytest.raises(ValueError):
            VideoAISettings(max_retries=0)

    def test_youtube_provider_validation(self):
        assert YouTubeSettings().provider == "yt_dlp"
        with pytest.raises(ValueError):
            YouTubeSettings(provider="vimeo")  # type: ignore[arg-type]

    def test_continuation_defaults(self):
        settings = ContinuationSettings()
        assert settings.provider == "http"
        assert settings.auth_token == ""

    def test_collections(self):
        settings = DocumentDBSettings()
        assert settings.collections.jobs == "jobs"
        assert settings.collections.place_items == "place_items"


class TestRootSettings:
    """Tests for root Settings model."""

    def test_default_values(self):
        settings = Settings()
        assert isinstance(settings.app, AppSettings)
        assert isinstance(settings.pipeline, PipelineSettings)
        assert isinstance(settings.video_ai, VideoAISettings)
        assert isinstance(settings.continuation, ContinuationSettings)
        assert isinstance(settings.telemetry, TelemetrySettings)


class TestSettingsLoader:
    """Tests for SettingsLoader."""

    def test_load_empty_config(self):
        with TemporaryDirectory() as tmpdir:
            loader = SettingsLoader(config_dir=Path(tmpdir), environment="dev")
            settings = loader.load()
            assert settings.app.name == "itinerary-pipeline"

    def test_load_environment_override(self):
        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)

            base_config = {
                "app": {"name": "test-app"},
                "pipeline": {"chunk_seconds": 300, "max_execution_seconds": 120},
            }
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump(base_config, f)

            prod_config = {
                "pipeline": {"max_execution_seconds": 240},
                "server": {"docs_enabled": False},
            }
            with (config_dir / "appsettings.prod.json").open("w") as f:
                json.dump(prod_config, f)

            loader = SettingsLoader(config_dir=config_dir, environment="prod")
            settings = loader.load()

            # Base values
            assert settings.app.name == "test-app"
            assert settings.pipeline.chunk_seconds == 300
            # Overridden values
            assert settings.pipeline.max_execution_seconds == 240
            assert settings.server.docs_enabled is False

    def test_env_vars_take_precedence(self, monkeypatch):
        monkeypatch.setenv("ITINERARY__PIPELINE__CHUNK_SECONDS", "600")
        monkeypatch.setenv("ITINERARY__CONTINUATION__PROVIDER", "local")

        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump({"pipeline": {"chunk_seconds": 300}}, f)

            settings = SettingsLoader(config_dir=config_dir, environment="dev").load()

        assert settings.pipeline.chunk_seconds == 600
        assert settings.continuation.provider == "local"

    def test_deep_merge(self):
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        override = {"a": {"b": 10, "e": 4}, "f": 5}

        result = _deep_merge(base, override)

        assert result == {"a": {"b": 10, "c": 2, "e": 4}, "d": 3, "f": 5}

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("False", False),
            ("42", 42),
            ("1.5", 1.5),
            ('["a", "b"]', ["a", "b"]),
            ("gemini-2.5-flash", "gemini-2.5-flash"),
        ],
    )
    def test_coerce_value(self, raw, expected):
        assert _coerce_value(raw) == expected


class TestGetSettings:
    """Tests for get_settings function."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_get_settings_cached(self):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            settings2 = get_settings(config_dir=Path(tmpdir))
            assert settings1 is settings2

    def test_get_settings_reload(self):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            settings2 = get_settings(config_dir=Path(tmpdir), reload=True)
            assert settings1 is not settings2
