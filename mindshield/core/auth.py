"""
API key authentication for the HTTP API.
"""

import hmac
from fastapi import Header, HTTPException, status

from config.settings import settings
from mindshield.core.logging import get_logger

logger = get_logger(__name__)


def verify_api_key(x_api_key: str = Header(...)) -> str:
    """
    Validates the mandatory 'x-api-key' header against the configured key.
    """
    expected_key = settings.api_key

    if not expected_key:
        logger.error("API_KEY is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error"
        )

    if not hmac.compare_digest(x_api_key.encode("utf-8"), expected_key.encode("utf-8")):
        logger.warning("Rejected request with invalid API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )
    return x_api_key
