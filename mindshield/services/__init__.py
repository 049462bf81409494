"""
Services package for recording processing and alert delivery.
"""

from .file_watcher import RecordingWatcher
from .notifications import (
    AlertNotifier, LoggingAlertNotifier, NotificationError, WebhookAlertNotifier, create_notifier
)
from .recording_pipeline import MissingTranscriptError, RecordingPipeline, extract_phone_number
from .transcription import DeepgramTranscriber, TranscriptionError

__all__ = [
    "RecordingWatcher",
    "AlertNotifier",
    "LoggingAlertNotifier",
    "NotificationError",
    "WebhookAlertNotifier",
    "create_notifier",
    "MissingTranscriptError",
    "RecordingPipeline",
    "extract_phone_number",
    "DeepgramTranscriber",
    "TranscriptionError"
]
