"""Infrastructure factory for creating service instances from configuration."""

from pathlib import Path
from typing import Any, cast

from itinerary_pipeline.commons.infrastructure.documentdb import (
    DocumentDBBase,
    MongoDBDocumentDB,
)
from itinerary_pipeline.commons.settings.models import Settings
from itinerary_pipeline.commons.telemetry import get_logger
from itinerary_pipeline.infrastructure.continuation import (
    ContinuationTriggerBase,
    HttpContinuationTrigger,
    LocalContinuationTrigger,
)
from itinerary_pipeline.infrastructure.video_ai import (
    GeminiVideoAnalyzer,
    VideoAnalyzerBase,
)
from itinerary_pipeline.infrastructure.youtube import (
    MetadataFetcherBase,
    YouTubeDataApiFetcher,
    YtDlpMetadataFetcher,
)

logger = get_logger(__name__)


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings and
    caches them, so every caller shares one client per provider.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            if doc_settings.username and doc_settings.password:
                connection_string = (
                    f"mongodb://{doc_settings.username}:{doc_settings.password}"
                    f"@{doc_settings.host}:{doc_settings.port}"
                    f"/?authSource={doc_settings.auth_source}"
                )
            else:
                connection_string = f"mongodb://{doc_settings.host}:{doc_settings.port}"
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=connection_string,
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_metadata_fetcher(self) -> MetadataFetcherBase:
        """Get video metadata fetcher instance.

        Returns:
            Configured metadata fetcher.

        Raises:
            ValueError: If provider is not supported.
        """
        if "metadata_fetcher" not in self._instances:
            yt_settings = self._settings.youtube
            provider = yt_settings.provider

            if provider == "yt_dlp":
                cookies_file = (
                    Path(yt_settings.cookies_file) if yt_settings.cookies_file else None
                )
                self._instances["metadata_fetcher"] = YtDlpMetadataFetcher(
                    cookies_file=cookies_file,
                    proxy=yt_settings.proxy,
                    timeout_seconds=yt_settings.timeout_seconds,
                )
            elif provider == "data_api":
                self._instances["metadata_fetcher"] = YouTubeDataApiFetcher(
                    api_key=yt_settings.data_api_key,
                    base_url=yt_settings.data_api_url,
                    timeout_seconds=yt_settings.timeout_seconds,
                )
            else:
                raise ValueError(f"Unsupported metadata provider: {provider}")

        return cast("MetadataFetcherBase", self._instances["metadata_fetcher"])

    def get_video_analyzer(self) -> VideoAnalyzerBase:
        """Get video analysis service instance.

        Returns:
            Configured video analyzer.
        """
        if "video_analyzer" not in self._instances:
            ai_settings = self._settings.video_ai
            self._instances["video_analyzer"] = GeminiVideoAnalyzer(
                api_key=ai_settings.api_key,
                model=ai_settings.model,
                base_url=ai_settings.base_url,
                temperature=ai_settings.temperature,
                max_output_tokens=ai_settings.max_output_tokens,
                max_retries=ai_settings.max_retries,
                retry_delay_seconds=ai_settings.retry_delay_seconds,
                timeout_seconds=ai_settings.timeout_seconds,
            )
        return cast("VideoAnalyzerBase", self._instances["video_analyzer"])

    def get_continuation_trigger(self) -> ContinuationTriggerBase:
        """Get continuation trigger instance.

        Returns:
            Configured continuation trigger. A local trigger still needs its
            handler bound before use.

        Raises:
            ValueError: If provider is not supported.
        """
        if "continuation" not in self._instances:
            cont_settings = self._settings.continuation
            provider = cont_settings.provider

            if provider == "http":
                self._instances["continuation"] = HttpContinuationTrigger(
                    base_url=cont_settings.base_url,
                    api_prefix=self._settings.server.api_prefix,
                    auth_token=cont_settings.auth_token,
                    timeout_seconds=cont_settings.timeout_seconds,
                )
            elif provider == "local":
                self._instances["continuation"] = LocalContinuationTrigger()
            else:
                raise ValueError(f"Unsupported continuation provider: {provider}")

        return cast("ContinuationTriggerBase", self._instances["continuation"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            if hasattr(instance, "close"):
                try:
                    close_result = instance.close()
                    if hasattr(close_result, "__await__"):
                        await close_result
                except Exception as e:
                    logger.warning(
                        "Error closing service",
                        extra={"service": name, "error": str(e)},
                    )

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
