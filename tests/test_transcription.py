"""
Tests for the Deepgram transcription client.
"""

import httpx
import pytest

from mindshield.services.transcription import DeepgramTranscriber, TranscriptionError

DEEPGRAM_RESPONSE = {
    "results": {
        "channels": [
            {"alternatives": [{"transcript": "Hello, this is the IRS.", "confidence": 0.98, "words": []}]}
        ]
    }
}


@pytest.fixture
def recording(tmp_path):
    path = tmp_path / "Call_555-0178_20260127_135555.m4a"
    path.write_bytes(b"fake-audio-bytes")
    return path


def make_transcriber(handler, api_key="test-deepgram-key"):
    return DeepgramTranscriber(
        api_key=api_key,
        url="https://transcription.test/v1/listen",
        transport=httpx.MockTransport(handler)
    )


class TestDeepgramTranscriber:
    """Test cases for DeepgramTranscriber.transcribe."""

    @pytest.mark.asyncio
    async def test_transcribe_success(self, recording):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json=DEEPGRAM_RESPONSE)

        transcript = await make_transcriber(handler).transcribe(str(recording))

        assert transcript == "Hello, this is the IRS."
        request = captured["request"]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Token test-deepgram-key"
        assert request.headers["Content-Type"] == "audio/mp4"
        assert request.url.params["model"] == "nova-3"
        assert request.url.params["smart_format"] == "true"
        assert request.url.params["diarize"] == "true"
        assert request.content == b"fake-audio-bytes"

    @pytest.mark.asyncio
    async def test_api_error_uses_err_msg(self, recording):
        def handler(request):
            return httpx.Response(401, json={"err_code": "INVALID_AUTH", "err_msg": "Invalid credentials."})

        with pytest.raises(TranscriptionError) as exc_info:
            await make_transcriber(handler).transcribe(str(recording))

        assert exc_info.value.status_code == 401
        assert exc_info.value.api_message == "Invalid credentials."
        assert "HTTP 401" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_api_error_uses_message(self, recording):
        def handler(request):
            return httpx.Response(400, json={"message": "Unsupported audio format"})

        with pytest.raises(TranscriptionError) as exc_info:
            await make_transcriber(handler).transcribe(str(recording))

        assert exc_info.value.api_message == "Unsupported audio format"

    @pytest.mark.asyncio
    async def test_api_error_without_json_body(self, recording):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(TranscriptionError) as exc_info:
            await make_transcriber(handler).transcribe(str(recording))

        assert exc_info.value.status_code == 502
        assert exc_info.value.api_message is None

    @pytest.mark.asyncio
    async def test_missing_transcript(self, recording):
        def handler(request):
            return httpx.Response(200, json={"results": {"channels": []}})

        with pytest.raises(TranscriptionError):
            await make_transcriber(handler).transcribe(str(recording))

    @pytest.mark.asyncio
    async def test_invalid_json(self, recording):
        def handler(request):
            return httpx.Response(200, content=b"not json")

        with pytest.raises(TranscriptionError):
            await make_transcriber(handler).transcribe(str(recording))

    @pytest.mark.asyncio
    async def test_network_error(self, recording):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TranscriptionError) as exc_info:
            await make_transcriber(handler).transcribe(str(recording))

        assert "Network error" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        def handler(request):
            return httpx.Response(200, json=DEEPGRAM_RESPONSE)

        with pytest.raises(TranscriptionError) as exc_info:
            await make_transcriber(handler).transcribe(str(tmp_path / "missing.m4a"))

        assert "Failed to read audio file" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unconfigured(self, recording):
        def handler(request):
            return httpx.Response(200, json=DEEPGRAM_RESPONSE)

        transcriber = make_transcriber(handler, api_key="")
        assert transcriber.is_configured is False
        with pytest.raises(TranscriptionError):
            await transcriber.transcribe(str(recording))
