"""
Authentication router: identity registration, session issuance, current user.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import get_auth_context
from routers.rate_limit import rate_limit
from services.access import Principal, require_authenticated
from services.accounts import get_current_user_service, issue_session_service, register_identity_service

router = APIRouter()


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=100)


class SessionRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    _rate_limit: None = Depends(rate_limit("auth_register", limit=20, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Create an identity and its profile, returning a session token."""
    return await register_identity_service(db, request.email, request.display_name)


@router.post("/session")
async def create_session(
    request: SessionRequest,
    auth: Principal = Depends(get_auth_context),
    _rate_limit: None = Depends(rate_limit("auth_session", limit=60, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Re-issue a session for an identity the provider has already verified. Service role only."""
    return await issue_session_service(db, auth, request.email)


@router.get("/me")
async def get_current_user(
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Get the caller's own profile, email included."""
    user_id = require_authenticated(auth)
    return await get_current_user_service(db, user_id)
