"""News banners router."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import get_auth_context, get_optional_auth_context
from services.access import Principal
from services.banners import create_banner_service, list_banners_service

router = APIRouter()


class CreateBannerRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    link: Optional[str] = Field(default=None, max_length=500)
    active: bool = True
    expires_at: Optional[datetime] = None


@router.get("")
async def list_banners(
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await list_banners_service(db, auth)


@router.post("", status_code=201)
async def create_banner(
    request: CreateBannerRequest,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await create_banner_service(db, auth, **request.model_dump())
