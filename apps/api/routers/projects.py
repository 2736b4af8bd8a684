"""Project links router."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import get_auth_context
from routers.rate_limit import rate_limit
from services.access import Principal
from services.projects import (
    create_project_service,
    delete_project_service,
    get_project_stats_service,
    list_idea_projects_service,
    update_project_service,
)

router = APIRouter()


class CreateProjectRequest(BaseModel):
    idea_id: str
    title: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=500)
    tools_used: List[str] = Field(default_factory=list)
    user_id: Optional[str] = None


class UpdateProjectRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    url: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=500)
    tools_used: Optional[List[str]] = None


@router.get("/ideas/{idea_id}/projects")
async def list_idea_projects(idea_id: str, db: AsyncSession = Depends(get_db)):
    return await list_idea_projects_service(db, idea_id)


@router.get("/projects/stats")
async def project_stats(db: AsyncSession = Depends(get_db)):
    """Campaign totals, tool breakdown and per-category counts."""
    return await get_project_stats_service(db)


@router.post("/projects", status_code=201)
async def create_project(
    request: CreateProjectRequest,
    _rate_limit: None = Depends(rate_limit("projects_create", limit=30, window_seconds=3600)),
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await create_project_service(db, auth, request.model_dump())


@router.patch("/projects/{project_id}")
async def update_project(
    project_id: str,
    request: UpdateProjectRequest,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await update_project_service(db, auth, project_id, request.model_dump(exclude_unset=True))


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: str,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await delete_project_service(db, auth, project_id)
