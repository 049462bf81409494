"""
Manual submission of call recordings to the processing pipeline.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from config.settings import settings
from mindshield.api.dependencies import get_pipeline, get_recording_dir
from mindshield.core.auth import verify_api_key
from mindshield.core.logging import get_logger, mask_recording_name
from mindshield.database.connection import get_db
from mindshield.database.utils import CallRecordRepository
from mindshield.schemas import CallRecordResponse, RecordingProcessedResponse, RecordingRequest
from mindshield.services.recording_pipeline import RecordingPipeline

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_key)])


def resolve_recording_path(file_path: str, recording_dir: Path) -> Path:
    """
    Check that a submitted path is a recording inside ``recording_dir``.

    Symlinks and ``..`` are resolved first, so neither can point the
    transcriber at other files on the server.

    Raises:
        HTTPException: 400 outside the directory or with another extension,
            404 if the file does not exist
    """
    resolved = Path(file_path).resolve()
    if not resolved.is_relative_to(recording_dir.resolve()):
        logger.warning(f"Rejected recording outside {recording_dir}: {mask_recording_name(file_path)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Recording must be inside the recordings directory"
        )

    extensions = {ext.lower() for ext in settings.watcher.file_extensions}
    if resolved.suffix.lower() not in extensions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported recording type; expected one of: {', '.join(sorted(extensions))}"
        )

    if not resolved.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recording not found")

    return resolved


@router.post("/recordings", response_model=RecordingProcessedResponse)
async def process_recording(
    request_data: RecordingRequest,
    pipeline: RecordingPipeline = Depends(get_pipeline),
    recording_dir: Path = Depends(get_recording_dir),
    db: Session = Depends(get_db)
):
    """
    Transcribe and analyse a recording that is already in the recordings
    directory. A recording that was processed before is reported as skipped.
    """
    resolve_recording_path(request_data.file_path, recording_dir)

    call_id = await pipeline.process_recording(request_data.file_path)
    if call_id is None:
        return RecordingProcessedResponse(skipped=True)

    record = CallRecordRepository(db).get_call_record_by_id(call_id)
    return RecordingProcessedResponse(
        call_id=call_id,
        call=CallRecordResponse.from_record(record) if record else None
    )
