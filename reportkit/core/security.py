"""API key security for the reporting endpoints."""

import logging
import secrets

from fastapi import Depends
from fastapi import HTTPException
from fastapi.security import APIKeyHeader

from reportkit.core.config import settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key")


async def verify_api_key(key: str = Depends(api_key_header)) -> bool:
    """FastAPI dependency that checks the ``X-API-Key`` header.

    Raises:
        HTTPException: 403 if the key does not match, or if the server has no key configured.
    """
    if not settings.api_key:
        logger.critical("API key security is enforced, but no API_KEY is configured on the server; denying request.")
        raise HTTPException(status_code=403, detail="Invalid API Key")

    if not secrets.compare_digest(key.encode("utf-8"), settings.api_key.encode("utf-8")):
        raise HTTPException(status_code=403, detail="Invalid API Key")
    return True
