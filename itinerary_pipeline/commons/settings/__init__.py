"""Settings management module."""

from itinerary_pipeline.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from itinerary_pipeline.commons.settings.models import (
    AppSettings,
    ContinuationSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    LangfuseSettings,
    PipelineSettings,
    ServerSettings,
    Settings,
    TelemetrySettings,
    VideoAISettings,
    YouTubeSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Storage
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    # External services
    "YouTubeSettings",
    "VideoAISettings",
    "ContinuationSettings",
    # Processing
    "PipelineSettings",
    # Telemetry
    "TelemetrySettings",
    "LangfuseSettings",
]
