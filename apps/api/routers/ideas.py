"""Idea catalog router with tier-gated reads."""

from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import get_auth_context, get_optional_auth_context
from services.access import Principal
from services.ideas import (
    create_idea_service,
    get_idea_service,
    get_popular_ideas_by_category,
    increment_view_count_service,
    list_free_tier_ideas_service,
    list_ideas_by_category_service,
    list_ideas_service,
    update_idea_service,
)
from services.search import search_ideas
from services.trending import get_trending_ideas

router = APIRouter()

Difficulty = Literal["Beginner", "Intermediate", "Advanced"]


class CreateIdeaRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=100)
    difficulty: Difficulty = "Beginner"
    tools: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    monetization_potential: Optional[str] = None
    estimated_build_time: Optional[str] = Field(default=None, max_length=50)
    free_tier: bool = False
    guest_visible: bool = False


class UpdateIdeaRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    difficulty: Optional[Difficulty] = None
    tools: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    monetization_potential: Optional[str] = None
    estimated_build_time: Optional[str] = Field(default=None, max_length=50)
    free_tier: Optional[bool] = None
    guest_visible: Optional[bool] = None


@router.get("")
async def list_ideas(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    category: Optional[str] = Query(default=None),
    difficulty: Optional[Difficulty] = Query(default=None),
    search: Optional[str] = Query(default=None),
    sort: Literal["popular", "recent", "difficulty", "title"] = Query(default="recent"),
    free_tier: Optional[bool] = Query(default=None),
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """List readable ideas; guests only ever see free-tier and guest-visible rows."""
    return await list_ideas_service(
        db,
        auth,
        page=page,
        limit=limit,
        category=category,
        difficulty=difficulty,
        search=search,
        sort=sort,
        free_tier=free_tier,
    )


@router.get("/free-tier")
async def list_free_tier_ideas(db: AsyncSession = Depends(get_db)):
    return await list_free_tier_ideas_service(db)


@router.get("/search")
async def search(
    q: str = Query(default="", max_length=200),
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    results = await search_ideas(db, auth, q)
    return {"data": results, "count": len(results), "query": q}


@router.get("/trending")
async def trending(
    days: Optional[int] = Query(default=None, ge=1, le=365),
    limit: Optional[int] = Query(default=None, ge=1, le=50),
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_trending_ideas(db, auth, days_back=days, limit=limit)
    return {"data": rows, "count": len(rows)}


@router.get("/category/{category}")
async def list_ideas_by_category(
    category: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await list_ideas_by_category_service(db, auth, category, page=page, limit=limit)


@router.get("/category/{category}/popular")
async def popular_ideas_by_category(
    category: str,
    limit: int = Query(default=5, ge=1, le=50),
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_popular_ideas_by_category(db, auth, category, limit)
    return {"data": rows, "count": len(rows), "category": category}


@router.get("/{idea_id}")
async def get_idea(
    idea_id: str,
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await get_idea_service(db, auth, idea_id)


@router.post("", status_code=201)
async def create_idea(
    request: CreateIdeaRequest,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await create_idea_service(db, auth, request.model_dump())


@router.patch("/{idea_id}")
async def update_idea(
    idea_id: str,
    request: UpdateIdeaRequest,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await update_idea_service(db, auth, idea_id, request.model_dump(exclude_unset=True))


@router.post("/{idea_id}/view")
async def increment_view(
    idea_id: str,
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await increment_view_count_service(db, auth, idea_id)
