"""
Test configuration settings using SQLite and no external providers.
"""

from typing import Optional

from config.settings import (
    Settings, DatabaseSettings, ClassifierSettings, TranscriptionSettings,
    WatcherSettings, AlertSettings
)


class TestDatabaseSettings(DatabaseSettings):
    """Test database configuration using SQLite."""

    url: str = "sqlite:///./test.db"
    echo: bool = False


class TestClassifierSettings(ClassifierSettings):
    """Classifier disabled so tests never reach the network."""

    api_key: Optional[str] = None
    timeout_seconds: float = 1.0


class TestTranscriptionSettings(TranscriptionSettings):
    """Transcription settings pointing at a fake endpoint."""

    api_key: str = "test-deepgram-key"
    url: str = "https://transcription.test/v1/listen"
    timeout_seconds: float = 1.0


class TestWatcherSettings(WatcherSettings):
    """Watcher never starts automatically in tests."""

    enabled: bool = False
    poll_interval_seconds: float = 0.01


class TestSettings(Settings):
    """Test application settings."""

    environment: str = "test"
    debug: bool = True
    api_key: str = "test-api-key"

    database: TestDatabaseSettings = TestDatabaseSettings()
    classifier: TestClassifierSettings = TestClassifierSettings()
    transcription: TestTranscriptionSettings = TestTranscriptionSettings()
    watcher: TestWatcherSettings = TestWatcherSettings()
    alerts: AlertSettings = AlertSettings(webhook_url=None)


# Test settings instance
test_settings = TestSettings()
