from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from config import ApplicationConfig


def generate_jwt(
    user_id: str,
    tenant_id: Optional[str],
    role: str,
    expires_delta: timedelta = timedelta(minutes=15),
) -> str:
    """
    Generate JWT access token

    Args:
        user_id: User id
        tenant_id: Tenant the user belongs to (None for superadmins)
        role: User role (superadmin, admin, member, ...)
        expires_delta: Token expiration duration

    Returns:
        JWT token string (HS256)
    """
    now = datetime.now(UTC)
    payload = {
        "user_id": str(user_id),
        "role": role,
        "exp": now + expires_delta,
        "iat": now,
    }
    if tenant_id is not None:
        payload["tenant"] = str(tenant_id)
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        return jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"])
    except JWTError:
        return None
