"""Signed session tokens carrying the request role."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from config import settings
from services.access import ROLE_AUTHENTICATED, ROLE_SERVICE, ROLES


SESSION_TOKEN_TYPE = "ideahub_session"
SERVICE_SUBJECT = "service"


def create_session_token(
    user_id: str,
    email: Optional[str] = None,
    expires_hours: Optional[int] = None,
    role: str = ROLE_AUTHENTICATED,
) -> Dict[str, Any]:
    """Create a signed session token payload for API authentication."""
    if role not in ROLES:
        raise ValueError(f"Unknown session role: {role}")
    now = datetime.now(timezone.utc)
    ttl_hours = int(expires_hours or settings.JWT_EXPIRATION_HOURS or 24)
    expires_at = now + timedelta(hours=max(ttl_hours, 1))
    claims: Dict[str, Any] = {
        "sub": user_id,
        "type": SESSION_TOKEN_TYPE,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    if email:
        claims["email"] = email

    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return {
        "token": token,
        "expires_at": int(expires_at.timestamp()),
    }


def create_service_token(expires_hours: Optional[int] = None) -> Dict[str, Any]:
    """Token for administrative callers (seeding, moderation, maintenance)."""
    return create_session_token(SERVICE_SUBJECT, expires_hours=expires_hours, role=ROLE_SERVICE)


def decode_session_token(token: str) -> Dict[str, Any]:
    """Decode and validate a signed session token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid or expired session token.") from exc

    token_type = str(payload.get("type", "")).strip()
    if token_type != SESSION_TOKEN_TYPE:
        raise ValueError("Invalid session token type.")

    subject = str(payload.get("sub", "")).strip()
    if not subject:
        raise ValueError("Session token missing subject.")

    role = str(payload.get("role", ROLE_AUTHENTICATED)).strip()
    if role not in (ROLE_AUTHENTICATED, ROLE_SERVICE):
        raise ValueError("Invalid session token role.")

    return payload
