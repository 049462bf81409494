"""
SQLAlchemy models for the MindShield call protection service.
Defines database schema for analysed calls and flagged scam numbers.
"""

from sqlalchemy import (
    Column, String, Integer, Text, Boolean,
    Index, CheckConstraint
)
from sqlalchemy.orm import declarative_base
import uuid

from mindshield.database.types import UUID, StringList, UTCDateTime, utcnow

Base = declarative_base()

TRANSCRIPTION_STATUSES = ('pending', 'processing', 'completed', 'failed')


class CallRecord(Base):
    """
    CallRecord model for a detected call recording.
    Tracks the record through transcription and scam analysis.
    """
    __tablename__ = 'call_records'

    # Primary key
    id = Column(UUID(), primary_key=True, default=uuid.uuid4)

    # Recording file
    file_path = Column(Text, unique=True, nullable=False)
    file_name = Column(String(255), nullable=False)
    detected_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    # Call metadata parsed from the file name
    phone_number = Column(String(50), nullable=True)
    duration_sec = Column(Integer, nullable=True)

    # Transcription
    transcript = Column(Text, nullable=True)
    transcription_status = Column(String(20), default='pending', nullable=False)

    # Scam analysis (NULL until analysed)
    risk_score = Column(Integer, nullable=True)
    risk_level = Column(String(10), nullable=True)  # 'green', 'yellow', 'red'
    scam_categories = Column(StringList(), nullable=True)
    scam_tactics = Column(StringList(), nullable=True)
    analysis_summary = Column(Text, nullable=True)
    analysis_degraded = Column(Boolean, default=False, nullable=False)

    user_dismissed = Column(Boolean, default=False, nullable=False)

    # Audit fields
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint('risk_score IS NULL OR (risk_score >= 0 AND risk_score <= 100)', name='valid_call_risk_score'),
        CheckConstraint("risk_level IS NULL OR risk_level IN ('green', 'yellow', 'red')", name='valid_risk_level'),
        CheckConstraint(
            "transcription_status IN ('pending', 'processing', 'completed', 'failed')",
            name='valid_transcription_status'
        ),
        CheckConstraint('duration_sec IS NULL OR duration_sec >= 0', name='non_negative_call_duration'),
        Index('idx_call_records_detected_at', 'detected_at'),
        Index('idx_call_records_risk_level', 'risk_level'),
        Index('idx_call_records_status', 'transcription_status'),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "file_path": self.file_path,
            "file_name": self.file_name,
            "detected_at": self.detected_at,
            "phone_number": self.phone_number,
            "duration_sec": self.duration_sec,
            "transcript": self.transcript,
            "transcription_status": self.transcription_status,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "scam_categories": self.scam_categories,
            "scam_tactics": self.scam_tactics,
            "analysis_summary": self.analysis_summary,
            "analysis_degraded": self.analysis_degraded,
            "user_dismissed": self.user_dismissed,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self):
        return f"<CallRecord(file_name='{self.file_name}', status='{self.transcription_status}', risk_score={self.risk_score})>"


class FlaggedNumber(Base):
    """
    FlaggedNumber model for phone numbers previously identified as scammers.
    """
    __tablename__ = 'flagged_numbers'

    phone_number = Column(String(50), primary_key=True)
    times_flagged = Column(Integer, default=1, nullable=False)
    highest_risk_score = Column(Integer, nullable=False)
    categories = Column(StringList(), nullable=True)
    first_flagged_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    last_flagged_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint('times_flagged > 0', name='positive_times_flagged'),
        CheckConstraint('highest_risk_score >= 0 AND highest_risk_score <= 100', name='valid_highest_risk_score'),
        Index('idx_flagged_numbers_last_flagged', 'last_flagged_at'),
    )

    def to_dict(self):
        return {
            "phone_number": self.phone_number,
            "times_flagged": self.times_flagged,
            "highest_risk_score": self.highest_risk_score,
            "categories": self.categories or [],
            "first_flagged_at": self.first_flagged_at,
            "last_flagged_at": self.last_flagged_at,
        }

    def __repr__(self):
        return f"<FlaggedNumber(phone_number='{self.phone_number}', times_flagged={self.times_flagged})>"
