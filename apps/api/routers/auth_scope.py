"""Authentication dependencies resolving the request principal."""

from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from services.access import ANONYMOUS, ROLE_AUTHENTICATED, ROLE_SERVICE, Principal
from services.session_token import decode_session_token


auth_scheme = HTTPBearer(auto_error=False)


def _principal_from_credentials(credentials: HTTPAuthorizationCredentials) -> Principal:
    if credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing Bearer session token.")

    try:
        payload = decode_session_token(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    role = str(payload.get("role", ROLE_AUTHENTICATED)).strip()
    if role == ROLE_SERVICE:
        return Principal(role=ROLE_SERVICE)
    return Principal(role=role, user_id=str(payload.get("sub", "")))


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
) -> Principal:
    """Resolve an authenticated or service principal from the Bearer session token."""
    if not credentials:
        raise HTTPException(status_code=401, detail="Missing Bearer session token.")
    return _principal_from_credentials(credentials)


async def get_optional_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
) -> Principal:
    """Like get_auth_context, but requests without a token run as the anonymous role."""
    if not credentials:
        return ANONYMOUS
    return _principal_from_credentials(credentials)
