"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "itinerary-pipeline"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    api_prefix: str = "/v1"
    docs_enabled: bool = True


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    jobs: str = "jobs"
    place_items: str = "place_items"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "itinerary"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class YouTubeSettings(BaseModel):
    """Video metadata lookup settings."""

    provider: Literal["yt_dlp", "data_api"] = "yt_dlp"
    data_api_key: str = ""
    data_api_url: str = "https://www.googleapis.com/youtube/v3"
    cookies_file: str | None = None
    proxy: str | None = None
    timeout_seconds: float = 15.0


class VideoAISettings(BaseModel):
    """Video understanding (Gemini) settings."""

    provider: Literal["gemini"] = "gemini"
    api_key: str = ""
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.5-flash"
    temperature: float = Field(default=0.2, ge=0, le=2)
    max_output_tokens: int = 8192
    max_retries: int = Field(default=3, ge=1, le=10)
    retry_delay_seconds: float = Field(default=2.0, ge=0)
    timeout_seconds: float = 90.0


class PipelineSettings(BaseModel):
    """Chunking, execution budget and progress settings for job processing."""

    chunk_seconds: int = Field(default=300, ge=10)
    default_chunk_seconds: int | None = Field(
        default=None,
        ge=10,
        description="Window used when the video duration is unknown",
    )
    max_execution_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Hand off to a fresh invocation once this much time elapsed",
    )
    chunk_delay_seconds: float = Field(default=1.5, ge=0)
    extract_progress_start: int = Field(default=30, ge=0, le=100)
    extract_progress_end: int = Field(default=80, ge=0, le=100)

    @model_validator(mode="after")
    def _check_progress_range(self) -> "PipelineSettings":
        if self.extract_progress_start > self.extract_progress_end:
            msg = "extract_progress_start must not exceed extract_progress_end"
            raise ValueError(msg)
        return self


class ContinuationSettings(BaseModel):
    """Self re-invocation settings."""

    provider: Literal["http", "local"] = "http"
    base_url: str = "http://localhost:8000"
    auth_token: str = ""
    timeout_seconds: float = 10.0


class LangfuseSettings(BaseModel):
    """Langfuse tracing settings."""

    enabled: bool = False
    public_key: str = ""
    secret_key: str = ""
    host: str = "https://cloud.langfuse.com"
    sample_rate: float = Field(default=1.0, ge=0, le=1)


class TelemetrySettings(BaseModel):
    """Telemetry and observability settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"
    langfuse: LangfuseSettings = Field(default_factory=LangfuseSettings)


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    youtube: YouTubeSettings = Field(default_factory=YouTubeSettings)
    video_ai: VideoAISettings = Field(default_factory=VideoAISettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    continuation: ContinuationSettings = Field(default_factory=ContinuationSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ITINERARY__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
