from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from mindshield.core.risk_level import RiskLevel, get_risk_description, get_risk_label

# --- Request Schemas ---

class TranscriptRequest(BaseModel):
    transcript: str = Field(..., max_length=200000)

class RecordingRequest(BaseModel):
    file_path: str = Field(..., min_length=1)

# --- Analysis Schemas ---

class KeywordFilterResponse(BaseModel):
    matched_phrases: List[str]
    preliminary_score: int
    categories: List[str]

class ScamAnalysisResponse(BaseModel):
    risk_score: int
    risk_level: str  # "green", "yellow", "red"
    label: str
    description: str
    scam_categories: List[str]
    scam_tactics: List[str]
    summary: str
    degraded: bool = False

    @classmethod
    def from_result(cls, result) -> "ScamAnalysisResponse":
        return cls(
            label=get_risk_label(result.risk_level),
            description=get_risk_description(result.risk_level),
            **result.to_dict()
        )

# --- Call Record Schemas ---

class CallRecordResponse(BaseModel):
    id: str
    file_path: str
    file_name: str
    detected_at: datetime
    phone_number: Optional[str] = None
    duration_sec: Optional[int] = None
    transcript: Optional[str] = None
    transcription_status: str
    risk_score: Optional[int] = None
    risk_level: Optional[str] = None
    risk_label: str = "Pending"
    scam_categories: Optional[List[str]] = None
    scam_tactics: Optional[List[str]] = None
    analysis_summary: Optional[str] = None
    analysis_degraded: bool = False
    user_dismissed: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record) -> "CallRecordResponse":
        data = record.to_dict()
        level = RiskLevel(record.risk_level) if record.risk_level else None
        data["risk_label"] = get_risk_label(level)
        return cls(**data)

class RecordingProcessedResponse(BaseModel):
    status: str = "success"
    call_id: Optional[str] = None
    skipped: bool = False
    call: Optional[CallRecordResponse] = None

class DeleteResponse(BaseModel):
    status: str = "success"
    deleted_calls: int
    deleted_flagged_numbers: int

# --- Flagged Number Schemas ---

class FlaggedNumberResponse(BaseModel):
    phone_number: str
    times_flagged: int
    highest_risk_score: int
    categories: List[str] = []
    first_flagged_at: datetime
    last_flagged_at: datetime
