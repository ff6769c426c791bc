"""API key authentication for guardrail write endpoints.

Implements API key validation using the X-API-Key header with
constant-time comparison.

Usage:
    from src.api.auth import verify_api_key

    @router.post("/guardrails/campaigns")
    def create_campaign(..., api_key: str = Depends(verify_api_key)):
        ...
"""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from src.common.config import load_api_config
from src.common.logging import get_logger

logger = get_logger(__name__)

# auto_error=False so a missing header yields 401 rather than 403
api_key_header = APIKeyHeader(
    name="X-API-Key",
    description="API key for guardrail edits",
    auto_error=False,
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "APIKey"},
    )


def verify_api_key(
    api_key: Optional[str] = Depends(api_key_header),
) -> str:
    """Validate the X-API-Key header against BRANDGUARD_API_KEY.

    Raises:
        HTTPException: 401 if the key is missing, wrong, or not configured.
    """
    if api_key is None:
        logger.warning("api_key_missing", extra={"event": "api_key_missing"})
        raise _unauthorized("Missing API key")

    expected_key = load_api_config().api_key
    if not expected_key:
        logger.warning("api_key_not_configured", extra={"event": "api_key_not_configured"})
        raise _unauthorized("API key not configured on server")

    if not secrets.compare_digest(api_key, expected_key):
        logger.warning("api_key_invalid", extra={"event": "api_key_invalid"})
        raise _unauthorized("Invalid API key")

    return api_key
