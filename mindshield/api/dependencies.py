"""
Shared FastAPI dependencies for the API routes.
"""

from pathlib import Path
from typing import Optional

from config.settings import settings
from mindshield.core.scam_analysis import ScamAnalysisEngine, get_analysis_engine
from mindshield.services.recording_pipeline import RecordingPipeline

_pipeline: Optional[RecordingPipeline] = None


def get_engine() -> ScamAnalysisEngine:
    return get_analysis_engine()


def get_pipeline() -> RecordingPipeline:
    """Return the process-wide recording pipeline, creating it on first use."""
    global _pipeline
    if _pipeline is None:
        _pipeline = RecordingPipeline()
    return _pipeline


def get_recording_dir() -> Path:
    """Directory manual recording submissions must come from."""
    return Path(settings.watcher.recording_dir)
