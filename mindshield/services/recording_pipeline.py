"""
Processing pipeline for new call recordings.

A recording goes through: known-scammer check, pending record, transcription,
scam analysis, and, for red calls, a user alert plus flagging of the caller.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.orm import Session as SQLAlchemySession

from config.settings import settings
from mindshield.core.logging import ContextLogger, mask_phone_number, mask_recording_name
from mindshield.core.metrics import MetricsCollector
from mindshield.core.risk_level import RiskLevel
from mindshield.core.scam_analysis import ScamAnalysisEngine, get_analysis_engine
from mindshield.database.connection import SessionLocal, session_scope
from mindshield.database.models import CallRecord
from mindshield.database.utils import CallRecordRepository
from mindshield.services.notifications import AlertNotifier, NotificationError, create_notifier
from mindshield.services.transcription import DeepgramTranscriber, TranscriptionError

logger = logging.getLogger(__name__)

# Samsung call recordings: Call_<number>_<YYYYMMDD>_<HHMMSS>.m4a
_RECORDING_NAME_PATTERN = re.compile(r"^Call_([^_]+)_\d{8}_\d{6}\.m4a$")


class MissingTranscriptError(ValueError):
    """Raised when a call has no transcript to analyse."""


def extract_phone_number(file_name: str) -> Optional[str]:
    """Return the caller number encoded in a recording file name, if any."""
    match = _RECORDING_NAME_PATTERN.match(file_name)
    return match.group(1) if match else None


class RecordingPipeline:
    """
    Takes call recordings from disk to a stored risk assessment.

    Collaborators are injected so tests can replace the transcriber,
    analysis engine and notifier. At most ``max_concurrent`` recordings are
    processed at the same time.
    """

    def __init__(
        self,
        session_factory: Callable[[], SQLAlchemySession] = SessionLocal,
        transcriber: Optional[DeepgramTranscriber] = None,
        engine: Optional[ScamAnalysisEngine] = None,
        notifier: Optional[AlertNotifier] = None,
        max_concurrent: Optional[int] = None
    ):
        self.session_factory = session_factory
        self.transcriber = transcriber or DeepgramTranscriber()
        self.engine = engine
        self.notifier = notifier or create_notifier()
        self._semaphore = asyncio.Semaphore(max_concurrent or settings.watcher.max_concurrent)

    def _engine(self) -> ScamAnalysisEngine:
        return self.engine or get_analysis_engine()

    async def process_recording(self, file_path: str) -> Optional[str]:
        """
        Process one recording.

        Args:
            file_path: Path of the new recording

        Returns:
            str: Id of the call record, None if the file was already processed
        """
        async with self._semaphore:
            with session_scope(self.session_factory) as db:
                return await self._process(CallRecordRepository(db), file_path)

    async def _process(self, repo: CallRecordRepository, file_path: str) -> Optional[str]:
        file_name = Path(file_path).name

        if repo.get_call_record_by_file_path(file_path) is not None:
            logger.info(f"File already processed: {mask_recording_name(file_path)}")
            MetricsCollector.record_recording_processed("skipped")
            return None

        phone_number = extract_phone_number(file_name)
        if phone_number:
            await self._check_known_scammer(repo, phone_number)

        record = repo.insert_call_record(
            file_path=file_path,
            file_name=file_name,
            phone_number=phone_number
        )
        call_id = str(record.id)
        call_logger = ContextLogger(logger, {"call_id": call_id, "file_name": mask_recording_name(file_name)})

        try:
            repo.update_transcription(call_id, 'processing')
            try:
                transcript = await self.transcriber.transcribe(file_path)
            except TranscriptionError as e:
                call_logger.error(
                    f"Transcription failed: {e}",
                    status_code=e.status_code
                )
                repo.update_transcription(call_id, 'failed')
                MetricsCollector.record_recording_processed("failed")
                return call_id

            repo.update_transcription(call_id, 'completed', transcript=transcript)

            result = await self._engine().analyze_transcript(transcript)
            repo.update_analysis(call_id, result)
            call_logger.info(
                "Call analysed",
                risk_score=result.risk_score,
                risk_level=result.risk_level.value
            )

            if result.risk_level is RiskLevel.RED:
                await self._alert(call_logger, call_id, result.summary, result.risk_score)
                if phone_number:
                    repo.flag_number(phone_number, result.risk_score, result.scam_categories)
                    call_logger.info("Flagged scam number", phone_number=mask_phone_number(phone_number))

        except Exception as e:
            call_logger.error(f"Error processing recording: {e}", exc_info=True)
            repo.db.rollback()
            repo.update_transcription(call_id, 'failed')
            MetricsCollector.record_recording_processed("failed")
            raise

        MetricsCollector.record_recording_processed("completed")
        return call_id

    async def _check_known_scammer(self, repo: CallRecordRepository, phone_number: str):
        flagged = repo.get_flagged_number(phone_number)
        if flagged is None:
            return

        masked = mask_phone_number(phone_number)
        logger.warning(
            "Known scammer detected",
            extra={"phone_number": masked, "times_flagged": flagged.times_flagged}
        )
        try:
            await self.notifier.send_known_scammer_alert(
                phone_number, flagged.times_flagged, flagged.highest_risk_score
            )
        except NotificationError as e:
            logger.error(f"Failed to send known scammer alert: {e}", extra={"phone_number": masked})

    async def _alert(self, call_logger: ContextLogger, call_id: str, summary: str, risk_score: int):
        try:
            await self.notifier.send_scam_alert(call_id, summary, risk_score)
        except NotificationError as e:
            call_logger.error(f"Failed to send scam alert: {e}")

    async def reanalyze_call(self, call_id: str) -> Optional[CallRecord]:
        """
        Rerun scam analysis on a stored transcript and replace the assessment.

        Returns:
            CallRecord: Updated record, None if the call does not exist

        Raises:
            MissingTranscriptError: If the call has no completed transcript
        """
        with session_scope(self.session_factory) as db:
            repo = CallRecordRepository(db)
            record = repo.get_call_record_by_id(call_id)
            if record is None:
                return None
            if record.transcription_status != 'completed' or record.transcript is None:
                raise MissingTranscriptError(f"Call {call_id} has no transcript to analyse")

            result = await self._engine().analyze_transcript(record.transcript)
            updated = repo.update_analysis(call_id, result)
            logger.info(
                f"Re-analysed call {call_id}",
                extra={"call_id": str(call_id), "risk_score": result.risk_score}
            )
            return updated
