"""
Speech-to-text for call recordings using the Deepgram API.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from config.settings import settings
from mindshield.core.logging import mask_recording_name
from mindshield.core.metrics import MetricsCollector

logger = logging.getLogger(__name__)


class TranscriptionError(Exception):
    """Raised when a recording cannot be read or transcribed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        api_message: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.api_message = api_message


def _extract_api_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("err_msg") or body.get("message") or str(body)
    return str(body)


def _extract_transcript(data: Any) -> str:
    try:
        transcript = data["results"]["channels"][0]["alternatives"][0]["transcript"]
    except (KeyError, IndexError, TypeError):
        transcript = None

    if not isinstance(transcript, str):
        raise TranscriptionError(
            "Transcription response did not contain a transcript at the expected path"
        )
    return transcript


class DeepgramTranscriber:
    """
    Uploads raw audio to Deepgram with smart formatting and speaker
    diarization enabled and returns the transcript text.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        transcription_settings = settings.transcription
        self.api_key = api_key if api_key is not None else transcription_settings.api_key
        self.url = url or transcription_settings.url
        self.timeout = timeout if timeout is not None else transcription_settings.timeout_seconds
        self.model = transcription_settings.model
        self.language = transcription_settings.language
        self.smart_format = transcription_settings.smart_format
        self.diarize = transcription_settings.diarize
        self.mime_type = transcription_settings.mime_type
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _query_params(self):
        return {
            "model": self.model,
            "language": self.language,
            "smart_format": str(self.smart_format).lower(),
            "diarize": str(self.diarize).lower(),
        }

    async def transcribe(self, file_path: str) -> str:
        """
        Transcribe an audio file.

        Args:
            file_path: Path of the recording on disk

        Returns:
            str: Full transcript text (may be empty for silent recordings)

        Raises:
            TranscriptionError: If the file cannot be read, the request fails
                or the response has no transcript
        """
        try:
            return await self._transcribe(file_path)
        except TranscriptionError:
            MetricsCollector.record_transcription("error")
            raise

    async def _transcribe(self, file_path: str) -> str:
        if not self.is_configured:
            raise TranscriptionError("Transcription API key is not configured")

        try:
            audio = await asyncio.to_thread(Path(file_path).read_bytes)
        except OSError as e:
            raise TranscriptionError(f"Failed to read audio file: {mask_recording_name(e)}") from e

        headers = {
            "Authorization": f"Token {self.api_key}",
            "Content-Type": self.mime_type,
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(
                    self.url,
                    params=self._query_params(),
                    headers=headers,
                    content=audio,
                )
        except httpx.HTTPError as e:
            raise TranscriptionError(f"Network error during transcription: {e}") from e

        if response.is_error:
            api_message = _extract_api_message(response)
            raise TranscriptionError(
                f"Transcription API error (HTTP {response.status_code}): "
                f"{api_message or response.reason_phrase}",
                status_code=response.status_code,
                api_message=api_message,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TranscriptionError("Failed to parse transcription response as JSON") from e

        transcript = _extract_transcript(data)
        MetricsCollector.record_transcription("success")
        logger.info(f"Transcribed {mask_recording_name(Path(file_path).name)} ({len(transcript)} characters)")
        return transcript
