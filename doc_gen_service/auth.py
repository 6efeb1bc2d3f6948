"""
Authentication Module

Requests from the reporting back end carry a shared secret in the
x-api-key header.
"""

import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from .config import settings


logger = logging.getLogger(__name__)
api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


async def verify_api_key(api_key: Optional[str] = Security(api_key_header)) -> str:
    """
    Verify the shared API key.

    Args:
        api_key: Value of the x-api-key header

    Returns:
        The API key if valid

    Raises:
        HTTPException: 401 if the key is missing or wrong
    """
    if not api_key or not secrets.compare_digest(api_key, settings.doc_gen_api_key):
        logger.warning("Rejected request with missing or invalid API key")
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing API key"
        )

    return api_key
