"""User profiles router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import get_auth_context, get_optional_auth_context
from services.access import Principal
from services.accounts import delete_user_service
from services.analytics import list_page_views_service
from services.comments import list_user_comments_service
from services.profiles import get_profile_service, get_user_stats, update_profile_service
from services.projects import list_user_projects_service

router = APIRouter()


class UpdateProfileRequest(BaseModel):
    display_name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)


@router.get("/me/page-views")
async def my_page_views(
    limit: int = Query(default=100, ge=1, le=500),
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """The caller's own page views (every row for the service role)."""
    return await list_page_views_service(db, auth, limit)


@router.patch("/profile")
async def update_profile(
    request: UpdateProfileRequest,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await update_profile_service(db, auth, request.model_dump(exclude_unset=True))


@router.get("/{user_id}/profile")
async def get_profile(
    user_id: str,
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await get_profile_service(db, auth, user_id)


@router.get("/{user_id}/projects")
async def get_user_projects(user_id: str, db: AsyncSession = Depends(get_db)):
    return await list_user_projects_service(db, user_id)


@router.get("/{user_id}/comments")
async def get_user_comments(
    user_id: str,
    limit: int = Query(default=50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await list_user_comments_service(db, user_id, limit)


@router.get("/{user_id}/stats")
async def user_stats(user_id: str, db: AsyncSession = Depends(get_db)):
    return await get_user_stats(db, user_id)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await delete_user_service(db, auth, user_id)
