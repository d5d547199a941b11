"""Unit tests for infrastructure factory."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from itinerary_pipeline.infrastructure.continuation import (
    HttpContinuationTrigger,
    LocalContinuationTrigger,
)
from itinerary_pipeline.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from itinerary_pipeline.infrastructure.video_ai import GeminiVideoAnalyzer
from itinerary_pipeline.infrastructure.youtube import (
    YouTubeDataApiFetcher,
    YtDlpMetadataFetcher,
)


@pytest.fixture(autouse=True)
def reset_factory_before_each():
    """Reset factory singleton before each test."""
    reset_factory()
    yield
    reset_factory()


@pytest.fixture
def mock_settings():
    """Create mock settings."""
    settings = MagicMock()

    # Server settings
    settings.server.api_prefix = "/v1"

    # Document DB settings
    settings.document_db.host = "localhost"
    settings.document_db.port = 27017
    settings.document_db.username = ""
    settings.document_db.password = ""
    settings.document_db.database = "test_db"
    settings.document_db.auth_source = "admin"

    # YouTube settings
    settings.youtube.provider = "yt_dlp"
    settings.youtube.data_api_key = "yt-key"
    settings.youtube.data_api_url = "https://www.googleapis.com/youtube/v3"
    settings.youtube.cookies_file = None
    settings.youtube.proxy = None
    settings.youtube.timeout_seconds = 15.0

    # Video AI settings
    settings.video_ai.api_key = "gemini-key"
    settings.video_ai.model = "gemini-2.5-flash"
    settings.video_ai.base_url = "https://generativelanguage.googleapis.com/v1beta"
    settings.video_ai.temperature = 0.2
    settings.video_ai.max_output_tokens = 8192
    settings.video_ai.max_retries = 3
    settings.video_ai.retry_delay_seconds = 2.0
    settings.video_ai.timeout_seconds = 90.0

    # Continuation settings
    settings.continuation.provider = "http"
    settings.continuation.base_url = "http://localhost:8000"
    settings.continuation.auth_token = ""
    settings.continuation.timeout_seconds = 10.0

    return settings


class TestInfrastructureFactory:
    """Tests for InfrastructureFactory."""

    def test_factory_init(self, mock_settings):
        """Test factory initialization."""
        factory = InfrastructureFactory(mock_settings)
        assert factory.settings is mock_settings
        assert factory._instances == {}

    @patch("itinerary_pipeline.infrastructure.factory.MongoDBDocumentDB")
    def test_get_document_db_without_auth(self, mock_mongo_class, mock_settings):
        """Test getting document database without authentication."""
        mock_instance = MagicMock()
        mock_mongo_class.return_value = mock_instance

        factory = InfrastructureFactory(mock_settings)
        doc_db = factory.get_document_db()

        assert doc_db is mock_instance
        assert factory.get_document_db() is doc_db
        mock_mongo_class.assert_called_once_with(
            connection_string="mongodb://localhost:27017",
            database_name="test_db",
        )

    @patch("itinerary_pipeline.infrastructure.factory.MongoDBDocumentDB")
    def test_get_document_db_with_auth(self, mock_mongo_class, mock_settings):
        """Test getting document database with authentication."""
        mock_settings.document_db.username = "user"
        mock_settings.document_db.password = "pass"

        factory = InfrastructureFactory(mock_settings)
        factory.get_document_db()

        connection_string = mock_mongo_class.call_args.kwargs["connection_string"]
        assert "user:pass" in connection_string
        assert connection_string.endswith("authSource=admin")

    def test_get_metadata_fetcher_yt_dlp(self, mock_settings):
        """Test getting the yt-dlp metadata fetcher."""
        factory = InfrastructureFactory(mock_settings)
        fetcher = factory.get_metadata_fetcher()

        assert isinstance(fetcher, YtDlpMetadataFetcher)
        # Should return same instance on second call
        assert factory.get_metadata_fetcher() is fetcher

    def test_get_metadata_fetcher_data_api(self, mock_settings):
        """Test getting the YouTube Data API fetcher."""
        mock_settings.youtube.provider = "data_api"

        factory = InfrastructureFactory(mock_settings)

        assert isinstance(factory.get_metadata_fetcher(), YouTubeDataApiFetcher)

    def test_get_metadata_fetcher_unsupported_provider(self, mock_settings):
        """Test getting metadata fetcher with unsupported provider."""
        mock_settings.youtube.provider = "unsupported"

        factory = InfrastructureFactory(mock_settings)

        with pytest.raises(ValueError, match="Unsupported metadata provider"):
            factory.get_metadata_fetcher()

    def test_get_video_analyzer(self, mock_settings):
        """Test getting the video analyzer."""
        factory = InfrastructureFactory(mock_settings)
        analyzer = factory.get_video_analyzer()

        assert isinstance(analyzer, GeminiVideoAnalyzer)
        assert analyzer.model_name == "gemini-2.5-flash"
        assert factory.get_video_analyzer() is analyzer

    def test_get_http_continuation_trigger(self, mock_settings):
        """Test getting the HTTP continuation trigger."""
        factory = InfrastructureFactory(mock_settings)

        assert isinstance(factory.get_continuation_trigger(), HttpContinuationTrigger)

    def test_get_local_continuation_trigger(self, mock_settings):
        """Test getting the in-process continuation trigger."""
        mock_settings.continuation.provider = "local"

        factory = InfrastructureFactory(mock_settings)

        assert isinstance(factory.get_continuation_trigger(), LocalContinuationTrigger)

    def test_get_continuation_trigger_unsupported_provider(self, mock_settings):
        """Test getting continuation trigger with unsupported provider."""
        mock_settings.continuation.provider = "queue"

        factory = InfrastructureFactory(mock_settings)

        with pytest.raises(ValueError, match="Unsupported continuation provider"):
            factory.get_continuation_trigger()

    async def test_close_all(self, mock_settings):
        """Test closing all services."""
        factory = InfrastructureFactory(mock_settings)

        sync_service = MagicMock()
        async_service = MagicMock()
        async_service.close = AsyncMock()
        factory._instances["sync"] = sync_service
        factory._instances["async"] = async_service

        await factory.close_all()

        sync_service.close.assert_called_once()
        async_service.close.assert_awaited_once()
        assert factory._instances == {}

    async def test_close_all_continues_after_error(self, mock_settings):
        """Test that one failing close does not stop the others."""
        factory = InfrastructureFactory(mock_settings)

        failing = MagicMock()
        failing.close = AsyncMock(side_effect=RuntimeError("already closed"))
        healthy = MagicMock()
        healthy.close = AsyncMock()
        factory._instances["failing"] = failing
        factory._instances["healthy"] = healthy

        await factory.close_all()

        healthy.close.assert_awaited_once()


class TestFactorySingleton:
    """Tests for factory singleton functions."""

    def test_get_factory_requires_settings_first_call(self):
        """Test that settings are required on first call."""
        with pytest.raises(ValueError, match="Settings required"):
            get_factory()

    def test_get_factory_returns_same_instance(self, mock_settings):
        """Test that same instance is returned."""
        factory1 = get_factory(mock_settings)
        factory2 = get_factory()  # No settings needed now

        assert factory1 is factory2

    def test_reset_factory(self, mock_settings):
        """Test factory reset."""
        factory1 = get_factory(mock_settings)
        reset_factory()

        with pytest.raises(ValueError):
            get_factory()

        factory2 = get_factory(mock_settings)
        assert factory1 is not factory2
