"""
Pytest configuration and fixtures for testing.
"""

import pytest
import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["API_KEY"] = "test-api-key"
os.environ["TRANSCRIPTION_API_KEY"] = "test-deepgram-key"
os.environ["WATCHER_ENABLED"] = "false"
os.environ.pop("CLASSIFIER_API_KEY", None)
os.environ.pop("ALERT_WEBHOOK_URL", None)

from config.test_settings import test_settings
from mindshield.api.dependencies import get_engine, get_pipeline, get_recording_dir
from mindshield.core.classifier import ClassifierPayload, ClassifierNetworkError
from mindshield.core.scam_analysis import ScamAnalysisEngine
from mindshield.database.connection import engine, SessionLocal, create_tables, drop_tables, get_db
from mindshield.database.models import CallRecord, FlaggedNumber
from mindshield.main import app
from mindshield.services.recording_pipeline import RecordingPipeline


@pytest.fixture(scope="session")
def test_engine():
    """Create the test database schema."""
    create_tables(bind=engine)

    yield engine

    drop_tables(bind=engine)
    engine.dispose()

    db_file = Path("./test.db")
    if db_file.exists():
        db_file.unlink()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create test database session; all rows are removed afterwards."""
    session = SessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.query(CallRecord).delete()
        session.query(FlaggedNumber).delete()
        session.commit()
        session.close()


@pytest.fixture
def api_headers():
    return {"x-api-key": test_settings.api_key}


@pytest.fixture
def failing_classifier():
    """Classifier that always fails with a network error."""
    classifier = Mock()
    classifier.classify = AsyncMock(side_effect=ClassifierNetworkError("connection refused"))
    return classifier


@pytest.fixture
def scam_classifier():
    """Classifier that returns a confident scam verdict."""
    classifier = Mock()
    classifier.classify = AsyncMock(return_value=ClassifierPayload(
        risk_score=95,
        scam_categories=["Government Impersonation", "Debt Collection Scam"],
        scam_tactics=["Fear/Threats", "Unusual Payment Methods"],
        summary="The caller pretends to be from the IRS and demands gift cards."
    ))
    return classifier


@pytest.fixture
def mock_transcriber():
    transcriber = Mock()
    transcriber.transcribe = AsyncMock(return_value="Hello, this is a normal call.")
    return transcriber


@pytest.fixture
def mock_notifier():
    notifier = Mock()
    notifier.send_scam_alert = AsyncMock(return_value=None)
    notifier.send_known_scammer_alert = AsyncMock(return_value=None)
    return notifier


@pytest.fixture
def pipeline_factory(test_engine, mock_transcriber, mock_notifier, failing_classifier):
    """Build a pipeline with fake collaborators; override any of them per test."""

    def build(transcriber=None, classifier=None, notifier=None, max_concurrent=2):
        return RecordingPipeline(
            session_factory=SessionLocal,
            transcriber=transcriber or mock_transcriber,
            engine=ScamAnalysisEngine(classifier=classifier or failing_classifier),
            notifier=notifier or mock_notifier,
            max_concurrent=max_concurrent
        )

    return build


@pytest.fixture(scope="function")
def client(test_db, pipeline_factory, scam_classifier, tmp_path):
    """Create test client with database, engine, pipeline and recording directory overrides."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    pipeline = pipeline_factory(classifier=scam_classifier)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_engine] = lambda: ScamAnalysisEngine(classifier=scam_classifier)
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_recording_dir] = lambda: tmp_path

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
