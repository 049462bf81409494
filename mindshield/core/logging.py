"""
Logging setup for MindShield.

Records are written as one JSON object per line. Anything passed through
``extra`` (``call_id``, ``risk_score``, ``phone_number`` ...) becomes a top-level
key. Call transcripts can be long and personal, so string fields are cut to
``MAX_FIELD_LENGTH`` characters.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

MAX_FIELD_LENGTH = 500

# Call_<number>_<YYYYMMDD>_<HHMMSS>, anywhere in a path or message
_RECORDING_NUMBER_PATTERN = re.compile(r"(Call_)([^_/\\]+)(_\d{8}_\d{6})")

# Attributes every LogRecord carries; they are not copied as extra fields.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def mask_phone_number(phone_number: Optional[str]) -> Optional[str]:
    """Keep only the last four digits of a caller number for log output."""
    if not phone_number:
        return phone_number
    if len(phone_number) <= 4:
        return "*" * len(phone_number)
    return "*" * (len(phone_number) - 4) + phone_number[-4:]


def mask_recording_name(path: Any) -> str:
    """
    Mask the caller number inside recording names such as
    ``Call_555-0178_20260127_135555.m4a``; other text is returned unchanged.
    """
    return _RECORDING_NUMBER_PATTERN.sub(
        lambda m: m.group(1) + mask_phone_number(m.group(2)) + m.group(3), str(path)
    )


def _truncate(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_FIELD_LENGTH:
        return value[:MAX_FIELD_LENGTH] + "...[truncated]"
    return value


class JSONFormatter(logging.Formatter):
    """Render log records as JSON lines."""

    def __init__(self, service: str = "mindshield"):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS or key.startswith("_"):
                continue
            entry[key] = _truncate(value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Route all logging to stdout.

    Args:
        level: Root log level name
        json_output: JSON lines when true, plain text for local debugging
    """
    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Request logging is done by the app middleware
    logging.getLogger("uvicorn.access").disabled = True

    for noisy in ("uvicorn.error", "httpx", "httpcore", "google_genai", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class ContextLogger:
    """
    Wraps a logger and attaches the same context (for example ``call_id``)
    to every record.
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        self.logger = logger
        self.context = dict(context or {})

    def _log(self, level: int, message: str, exc_info=None, **fields):
        self.logger.log(level, message, exc_info=exc_info, extra={**self.context, **fields})

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self._log(logging.ERROR, message, **fields)

    def with_context(self, **context) -> "ContextLogger":
        return ContextLogger(self.logger, {**self.context, **context})
