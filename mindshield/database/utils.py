"""
Database utility functions and helpers.
"""

from sqlalchemy.orm import Session as SQLAlchemySession
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, List, Union
import logging
import uuid
from datetime import datetime

from mindshield.core.logging import mask_phone_number, mask_recording_name
from mindshield.core.metrics import MetricsCollector
from mindshield.core.risk_level import RiskLevel
from mindshield.core.scam_analysis import ScamAnalysisResult, merge_categories
from .models import CallRecord, FlaggedNumber
from .types import utcnow

logger = logging.getLogger(__name__)

CallId = Union[str, uuid.UUID]


def _as_uuid(call_id: CallId) -> Optional[uuid.UUID]:
    if isinstance(call_id, uuid.UUID):
        return call_id
    try:
        return uuid.UUID(str(call_id))
    except ValueError:
        return None


class CallRecordRepository:
    """
    Repository for call records and flagged numbers.

    Reads log failures and return an empty result; writes roll back and
    re-raise so callers can decide how to recover.
    """

    def __init__(self, db: SQLAlchemySession):
        self.db = db

    def _commit(self, operation: str, table: str):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            MetricsCollector.record_database_operation(operation, table, "error")
            raise
        MetricsCollector.record_database_operation(operation, table, "success")

    # Call records

    def get_all_call_records(self, risk_level: Optional[str] = None) -> List[CallRecord]:
        """
        List call records, newest first.

        Args:
            risk_level: Only return records with this level (optional)
        """
        try:
            query = self.db.query(CallRecord)
            if risk_level is not None:
                query = query.filter(CallRecord.risk_level == RiskLevel(risk_level).value)
            return query.order_by(CallRecord.detected_at.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list call records: {e}")
            return []

    def get_call_record_by_id(self, call_id: CallId) -> Optional[CallRecord]:
        record_id = _as_uuid(call_id)
        if record_id is None:
            return None
        try:
            return self.db.query(CallRecord).filter(CallRecord.id == record_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to retrieve call record {call_id}: {e}")
            return None

    def get_call_record_by_file_path(self, file_path: str) -> Optional[CallRecord]:
        try:
            return self.db.query(CallRecord).filter(CallRecord.file_path == file_path).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to retrieve call record for {mask_recording_name(file_path)}: {e}")
            return None

    def insert_call_record(
        self,
        file_path: str,
        file_name: str,
        phone_number: Optional[str] = None,
        duration_sec: Optional[int] = None,
        detected_at: Optional[datetime] = None
    ) -> CallRecord:
        """
        Insert a new call record in the ``pending`` state.

        Raises:
            SQLAlchemyError: If database operation fails (including a
                duplicate ``file_path``)
        """
        try:
            record = CallRecord(
                file_path=file_path,
                file_name=file_name,
                phone_number=phone_number,
                duration_sec=duration_sec,
                detected_at=detected_at or utcnow(),
                transcription_status='pending'
            )
            self.db.add(record)
            self._commit("insert", "call_records")
            self.db.refresh(record)

            logger.info(f"Inserted call record {record.id} for {mask_recording_name(file_name)}")
            return record

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to insert call record for {mask_recording_name(file_path)}: {e}")
            raise

    def update_transcription(
        self,
        call_id: CallId,
        status: str,
        transcript: Optional[str] = None
    ) -> Optional[CallRecord]:
        """
        Update the transcription status, and the transcript when given.

        Returns:
            CallRecord: Updated record, None if it does not exist
        """
        record = self.get_call_record_by_id(call_id)
        if record is None:
            logger.error(f"Call record {call_id} not found")
            return None

        try:
            record.transcription_status = status
            if transcript is not None:
                record.transcript = transcript
            record.updated_at = utcnow()
            self._commit("update", "call_records")
            self.db.refresh(record)

            logger.debug(f"Call record {call_id} transcription status set to {status}")
            return record

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update transcription for {call_id}: {e}")
            raise

    def update_analysis(self, call_id: CallId, result: ScamAnalysisResult) -> Optional[CallRecord]:
        """
        Replace the stored risk assessment of a call with ``result``.

        Returns:
            CallRecord: Updated record, None if it does not exist
        """
        record = self.get_call_record_by_id(call_id)
        if record is None:
            logger.error(f"Call record {call_id} not found")
            return None

        try:
            record.risk_score = result.risk_score
            record.risk_level = result.risk_level.value
            record.scam_categories = list(result.scam_categories)
            record.scam_tactics = list(result.scam_tactics)
            record.analysis_summary = result.summary
            record.analysis_degraded = result.degraded
            record.updated_at = utcnow()
            self._commit("update", "call_records")
            self.db.refresh(record)

            logger.info(
                f"Stored analysis for call {call_id}: "
                f"score={result.risk_score}, level={result.risk_level.value}"
            )
            return record

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store analysis for {call_id}: {e}")
            raise

    def dismiss_call(self, call_id: CallId) -> Optional[CallRecord]:
        record = self.get_call_record_by_id(call_id)
        if record is None:
            return None

        try:
            record.user_dismissed = True
            record.updated_at = utcnow()
            self._commit("update", "call_records")
            self.db.refresh(record)

            logger.info(f"Call record {call_id} dismissed")
            return record

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to dismiss call record {call_id}: {e}")
            raise

    def get_undismissed_high_risk_calls(self) -> List[CallRecord]:
        """Red calls the user has not dismissed yet, newest first."""
        try:
            return self.db.query(CallRecord).filter(
                CallRecord.risk_level == RiskLevel.RED.value,
                CallRecord.user_dismissed.is_(False)
            ).order_by(CallRecord.detected_at.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list high-risk calls: {e}")
            return []

    def get_pending_calls(self) -> List[CallRecord]:
        """Calls still waiting for transcription, oldest first."""
        try:
            return self.db.query(CallRecord).filter(
                CallRecord.transcription_status == 'pending'
            ).order_by(CallRecord.detected_at.asc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list pending calls: {e}")
            return []

    def delete_all_call_records(self) -> int:
        try:
            deleted_count = self.db.query(CallRecord).delete()
            self._commit("delete", "call_records")
            logger.warning(f"Deleted {deleted_count} call records")
            return deleted_count

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete call records: {e}")
            raise

    # Flagged numbers

    def flag_number(
        self,
        phone_number: str,
        risk_score: int,
        categories: Optional[List[str]] = None
    ) -> FlaggedNumber:
        """
        Flag a phone number as a scammer.

        A number that is already flagged has its counter incremented, keeps
        the highest score seen and accumulates categories.

        Raises:
            SQLAlchemyError: If database operation fails
        """
        categories = categories or []
        try:
            flagged = self.get_flagged_number(phone_number)
            now = utcnow()

            if flagged is None:
                flagged = FlaggedNumber(
                    phone_number=phone_number,
                    times_flagged=1,
                    highest_risk_score=risk_score,
                    categories=list(categories),
                    first_flagged_at=now,
                    last_flagged_at=now
                )
                self.db.add(flagged)
            else:
                flagged.times_flagged += 1
                flagged.highest_risk_score = max(flagged.highest_risk_score, risk_score)
                flagged.categories = merge_categories(flagged.categories or [], categories)
                flagged.last_flagged_at = now

            self._commit("upsert", "flagged_numbers")
            self.db.refresh(flagged)

            logger.info(f"Flagged number {mask_phone_number(phone_number)} ({flagged.times_flagged} times)")
            return flagged

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to flag number {mask_phone_number(phone_number)}: {e}")
            raise

    def get_flagged_number(self, phone_number: str) -> Optional[FlaggedNumber]:
        try:
            return self.db.query(FlaggedNumber).filter(
                FlaggedNumber.phone_number == phone_number
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to retrieve flagged number {mask_phone_number(phone_number)}: {e}")
            return None

    def get_all_flagged_numbers(self) -> List[FlaggedNumber]:
        try:
            return self.db.query(FlaggedNumber).order_by(
                FlaggedNumber.last_flagged_at.desc()
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list flagged numbers: {e}")
            return []

    def delete_all_flagged_numbers(self) -> int:
        try:
            deleted_count = self.db.query(FlaggedNumber).delete()
            self._commit("delete", "flagged_numbers")
            logger.warning(f"Deleted {deleted_count} flagged numbers")
            return deleted_count

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete flagged numbers: {e}")
            raise
