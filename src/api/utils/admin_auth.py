"""
Billing relay authentication

The relay in front of the billing providers verifies their signatures and
calls this service with a shared key in X-Admin-API-Key.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, status
from fastapi.security import APIKeyHeader

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError

logger = logging.getLogger(__name__)

relay_key_header = APIKeyHeader(name="X-Admin-API-Key", auto_error=False)


async def verify_admin_api_key(api_key: Optional[str] = Depends(relay_key_header)) -> bool:
    """
    Raises:
        ClientError: 401 UNAUTHORIZED when the key is absent,
                     401 INVALID_API_KEY when it does not match
    """
    if not api_key:
        raise ClientError(
            Error("UNAUTHORIZED", "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if not secrets.compare_digest(api_key, ApplicationConfig.ADMIN_API_KEY):
        logger.warning("Rejected billing relay call with an invalid API key")
        raise ClientError(
            Error("INVALID_API_KEY", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
