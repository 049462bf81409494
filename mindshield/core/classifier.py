"""
Semantic risk classifier integration.

The classifier is an untrusted, fallible collaborator. The scoring engine only
depends on the ``RiskClassifier`` protocol, so tests can swap in fakes that
succeed, time out or return malformed data without touching the network.
"""

import asyncio
import json
import math
import re
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config.settings import settings
from mindshield.core.logging import get_logger
from mindshield.core.metrics import MetricsCollector
from mindshield.core.prompts import SCAM_ANALYSIS_SYSTEM_PROMPT, build_user_prompt
from mindshield.core.risk_level import clamp_score

logger = get_logger(__name__)

# Classifier replies may wrap the JSON object in prose or markdown fences.
_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


class ClassifierError(Exception):
    """Base error for any risk classifier failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ClassifierUnavailableError(ClassifierError):
    """The classifier is not configured."""


class ClassifierNetworkError(ClassifierError):
    """Connectivity failure while calling the classifier."""


class ClassifierTimeoutError(ClassifierNetworkError):
    """The classifier did not answer within the configured timeout."""


class ClassifierProtocolError(ClassifierError):
    """The classifier API answered with a non-success status."""


class ClassifierPayloadError(ClassifierError):
    """The classifier reply could not be parsed or failed validation."""


@dataclass(frozen=True)
class ClassifierPayload:
    """Validated classifier verdict for one transcript."""
    risk_score: int
    scam_categories: List[str] = field(default_factory=list)
    scam_tactics: List[str] = field(default_factory=list)
    summary: str = ""


class RiskClassifier(Protocol):
    """Capability interface for semantic transcript classification."""

    async def classify(self, transcript: str) -> ClassifierPayload:
        ...


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def validate_payload(data: Any) -> ClassifierPayload:
    """
    Validate a decoded classifier reply.

    Args:
        data: Decoded JSON object

    Returns:
        ClassifierPayload: payload with ``risk_score`` rounded and clamped to 0-100

    Raises:
        ClassifierPayloadError: If a required field is missing or has the wrong shape
    """
    if not isinstance(data, dict):
        raise ClassifierPayloadError("Classifier response is not a JSON object")

    risk_score = data.get("risk_score")
    if isinstance(risk_score, bool) or not isinstance(risk_score, (int, float)):
        raise ClassifierPayloadError("Classifier response has a missing or non-numeric risk_score")
    if not math.isfinite(risk_score):
        raise ClassifierPayloadError("Classifier response risk_score is not finite")

    scam_categories = data.get("scam_categories")
    scam_tactics = data.get("scam_tactics")
    if not _is_string_list(scam_categories):
        raise ClassifierPayloadError("Classifier response scam_categories must be a list of strings")
    if not _is_string_list(scam_tactics):
        raise ClassifierPayloadError("Classifier response scam_tactics must be a list of strings")

    summary = data.get("summary")
    if not isinstance(summary, str):
        raise ClassifierPayloadError("Classifier response is missing a summary string")

    return ClassifierPayload(
        risk_score=clamp_score(risk_score),
        scam_categories=list(scam_categories),
        scam_tactics=list(scam_tactics),
        summary=summary,
    )


def coerce_payload(reply: Any) -> ClassifierPayload:
    """
    Validate whatever a ``RiskClassifier`` handed back.

    Accepts a ``ClassifierPayload`` or a mapping with the same keys; both go
    through ``validate_payload`` so a fake or third-party classifier gets the
    same checks as the Gemini reply parser.
    """
    if isinstance(reply, ClassifierPayload):
        return validate_payload(asdict(reply))
    if isinstance(reply, Mapping):
        return validate_payload(dict(reply))
    raise ClassifierPayloadError(
        f"Classifier returned {type(reply).__name__}, expected a payload object or mapping"
    )


def parse_classifier_reply(content: Optional[str]) -> ClassifierPayload:
    """Extract and validate the JSON verdict embedded in a classifier reply."""
    if not content:
        raise ClassifierPayloadError("Classifier response did not contain message content")

    match = _JSON_OBJECT_PATTERN.search(content)
    if not match:
        raise ClassifierPayloadError("Failed to find JSON in classifier response")

    try:
        data: Dict[str, Any] = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ClassifierPayloadError(f"Failed to parse classifier response as JSON: {e}") from e

    return validate_payload(data)


class GeminiRiskClassifier:
    """
    Risk classifier backed by Google Gemini.

    Sends the transcript with the FTC/FDIC scam taxonomy prompt and expects a
    JSON verdict back. Every failure is raised as a ``ClassifierError``
    subclass; the call is bounded by ``timeout`` and can be cancelled.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        client: Optional[Any] = None
    ):
        classifier_settings = settings.classifier
        self.api_key = api_key if api_key is not None else classifier_settings.api_key
        self.model_name = model or classifier_settings.model
        self.timeout = timeout if timeout is not None else classifier_settings.timeout_seconds
        self.generation_config = types.GenerateContentConfig(
            system_instruction=SCAM_ANALYSIS_SYSTEM_PROMPT,
            temperature=temperature if temperature is not None else classifier_settings.temperature,
            max_output_tokens=max_output_tokens or classifier_settings.max_output_tokens,
            response_mime_type="application/json",
            candidate_count=1,
        )

        if client is not None:
            self.client = client
        elif self.api_key:
            self.client = genai.Client(api_key=self.api_key)
        else:
            logger.warning("Classifier API key not set. Semantic analysis disabled.")
            self.client = None

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def classify(self, transcript: str) -> ClassifierPayload:
        """
        Classify a transcript.

        Raises:
            ClassifierError: On any failure (unconfigured, network, timeout,
                API status, unparseable or invalid reply)
        """
        if self.client is None:
            raise ClassifierUnavailableError("Risk classifier is not configured")

        start_time = time.time()
        status = "error"
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model_name,
                    contents=build_user_prompt(transcript),
                    config=self.generation_config,
                ),
                timeout=self.timeout,
            )
            payload = parse_classifier_reply(getattr(response, "text", None))
            status = "success"
            return payload
        except asyncio.TimeoutError as e:
            status = "timeout"
            raise ClassifierTimeoutError(
                f"Classifier did not respond within {self.timeout} seconds"
            ) from e
        except genai_errors.APIError as e:
            status = "api_error"
            raise ClassifierProtocolError(
                f"Classifier API error (HTTP {e.code}): {e.message or e.status}",
                status_code=e.code,
            ) from e
        except ClassifierError:
            status = "invalid_payload"
            raise
        except Exception as e:
            raise ClassifierNetworkError(f"Network error calling classifier: {e}") from e
        finally:
            MetricsCollector.record_classifier_call(
                self.model_name, status, time.time() - start_time
            )
