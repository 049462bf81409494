"""
Configuration management using Pydantic Settings.
Handles environment variables and application configuration.
"""

from typing import Optional, List
from pydantic import Field
from pydantic_settings import BaseSettings


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    url: str = Field(
        default="sqlite:///./mindshield.db",
        description="SQLAlchemy database URL (SQLite or PostgreSQL)"
    )

    echo: bool = Field(
        default=False,
        description="Enable SQLAlchemy query logging"
    )
    pool_size: int = Field(
        default=5,
        description="Database connection pool size"
    )
    max_overflow: int = Field(
        default=10,
        description="Maximum overflow connections"
    )
    pool_timeout: int = Field(
        default=30,
        description="Connection pool timeout in seconds"
    )
    pool_recycle: int = Field(
        default=3600,
        description="Connection pool recycle time in seconds"
    )

    class Config:
        env_prefix = "DATABASE_"


class ClassifierSettings(BaseSettings):
    """Semantic risk classifier (Gemini) settings."""

    api_key: Optional[str] = Field(
        default=None,
        description="Google API key; the classifier is disabled when unset"
    )
    model: str = Field(
        default="gemini-2.0-flash",
        description="Model used for transcript analysis"
    )
    temperature: float = Field(
        default=0.2,
        description="Sampling temperature for analysis requests"
    )
    max_output_tokens: int = Field(
        default=1024,
        description="Maximum tokens in the classifier reply"
    )
    timeout_seconds: float = Field(
        default=20.0,
        description="Upper bound on a single classifier call"
    )

    class Config:
        env_prefix = "CLASSIFIER_"


class TranscriptionSettings(BaseSettings):
    """Speech-to-text provider (Deepgram) settings."""

    api_key: Optional[str] = Field(
        default=None,
        description="Deepgram API key"
    )
    url: str = Field(
        default="https://api.deepgram.com/v1/listen",
        description="Transcription endpoint"
    )
    model: str = "nova-3"
    language: str = "en"
    smart_format: bool = True
    diarize: bool = True
    mime_type: str = "audio/mp4"
    timeout_seconds: float = Field(
        default=120.0,
        description="Upload and transcription timeout in seconds"
    )

    class Config:
        env_prefix = "TRANSCRIPTION_"


class WatcherSettings(BaseSettings):
    """Recording folder watcher settings."""

    enabled: bool = Field(
        default=False,
        description="Start the folder watcher on application startup"
    )
    recording_dir: str = Field(
        default="/storage/emulated/0/Recordings/Call",
        description="Directory the phone writes call recordings into"
    )
    poll_interval_seconds: float = Field(
        default=5.0,
        description="Seconds between directory scans"
    )
    file_extensions: List[str] = Field(
        default=[".m4a"],
        description="Recording file extensions to pick up"
    )
    max_concurrent: int = Field(
        default=2,
        description="Maximum recordings processed at the same time"
    )

    class Config:
        env_prefix = "WATCHER_"


class AlertSettings(BaseSettings):
    """Alert delivery settings."""

    webhook_url: Optional[str] = Field(
        default=None,
        description="Push gateway webhook; alerts are only logged when unset"
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Webhook request timeout in seconds"
    )

    class Config:
        env_prefix = "ALERT_"


class Settings(BaseSettings):
    """Main application settings."""

    # Application metadata
    app_name: str = "MindShield Call Protection API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "production"
    log_level: str = "INFO"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Security settings
    api_key: str = Field(
        ...,
        min_length=1,
        description="Shared secret clients send in the x-api-key header; there is no default"
    )

    database: DatabaseSettings = DatabaseSettings()
    classifier: ClassifierSettings = ClassifierSettings()
    transcription: TranscriptionSettings = TranscriptionSettings()
    watcher: WatcherSettings = WatcherSettings()
    alerts: AlertSettings = AlertSettings()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"


# Global settings instance
settings = Settings()
