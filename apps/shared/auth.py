"""
API Key Authentication

Client apps call the internal /posts endpoints with a shared secret in the
X-API-Key header, compared against INTERNAL_API_KEY.
"""

import os
import hmac
import logging
from typing import Optional

from fastapi import Security
from fastapi.security import APIKeyHeader

from apps.shared.errors import Unauthorized

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"

INTERNAL_API_KEY = os.getenv("INTERNAL_API_KEY")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# auto_error=False so a missing header reaches get_api_key and becomes our 401 body
api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def get_api_key(api_key: Optional[str] = Security(api_key_header)) -> Optional[str]:
    """
    Check X-API-Key on the internal /posts endpoints.

    Without INTERNAL_API_KEY configured, development lets every request
    through with a warning and production refuses to serve.
    """
    if not INTERNAL_API_KEY:
        if ENVIRONMENT == "production":
            raise RuntimeError("INTERNAL_API_KEY is required when ENVIRONMENT=production")
        logger.warning("INTERNAL_API_KEY not set, internal post endpoints are open (development only)")
        return None

    # Constant-time compare
    if api_key is None or not hmac.compare_digest(api_key, INTERNAL_API_KEY):
        raise Unauthorized("Invalid or missing API key")

    return api_key
