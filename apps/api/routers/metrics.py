"""Analytics and campaign metrics router (mounted at /metrics and /analytics)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from routers.auth_scope import get_auth_context, get_optional_auth_context
from routers.rate_limit import rate_limit
from services.access import Principal
from services.analytics import (
    cleanup_page_views_service,
    export_metrics_service,
    get_campaign_metrics,
    get_dashboard_metrics,
    get_projects_goal,
    get_tool_usage_buckets,
    list_daily_metrics_service,
    record_page_view,
)

router = APIRouter()


class PageViewRequest(BaseModel):
    page: str = Field(min_length=1, max_length=100)
    idea_id: Optional[str] = None


class CleanupRequest(BaseModel):
    days_to_keep: Optional[int] = Field(default=None, ge=0, le=3650)


@router.post("/page-view", status_code=201)
async def track_page_view(
    request: PageViewRequest,
    _rate_limit: None = Depends(
        rate_limit("page_view", limit=lambda: settings.PAGE_VIEW_RATE_LIMIT_PER_HOUR, window_seconds=3600)
    ),
    auth: Principal = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Record a page view for guests and signed-in users alike."""
    return await record_page_view(db, auth, request.page, request.idea_id)


@router.get("/campaign")
async def campaign_metrics(db: AsyncSession = Depends(get_db)):
    return await get_campaign_metrics(db)


@router.get("/dashboard")
async def dashboard(
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await get_dashboard_metrics(db, auth)


@router.get("/projects-goal")
async def projects_goal(db: AsyncSession = Depends(get_db)):
    return await get_projects_goal(db)


@router.get("/tool-usage")
async def tool_usage(db: AsyncSession = Depends(get_db)):
    return await get_tool_usage_buckets(db)


@router.get("/export")
async def export_metrics(
    format: Literal["csv", "json"] = Query(default="json"),
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    exported = await export_metrics_service(db, auth, format)
    stamp = int(datetime.now(timezone.utc).timestamp())
    filename = f"ideahub-metrics-{stamp}.{exported['format']}"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if exported["format"] == "csv":
        return Response(content=exported["content"], media_type="text/csv", headers=headers)
    return JSONResponse(content=exported["content"], headers=headers)


@router.get("/daily")
async def daily_metrics(
    key: Optional[str] = Query(default=None, max_length=100),
    days: int = Query(default=30, ge=1, le=365),
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await list_daily_metrics_service(db, auth, key, days)


@router.post("/cleanup")
async def cleanup_page_views(
    request: CleanupRequest,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Delete aged page views (service role)."""
    return await cleanup_page_views_service(db, auth, request.days_to_keep)
