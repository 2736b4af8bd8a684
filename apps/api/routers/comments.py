"""Comment threads router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import get_auth_context
from routers.rate_limit import rate_limit
from services.access import Principal
from services.comments import (
    create_comment_service,
    delete_comment_service,
    flag_comment_service,
    get_comment_thread,
    list_idea_comments_service,
    reply_to_comment_service,
    update_comment_service,
)
from services.ideas import load_idea

router = APIRouter()

# Request bodies are held to a tighter limit than the column allows.
MAX_COMMENT_BODY = 2000


class CreateCommentRequest(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_COMMENT_BODY)
    parent_comment_id: Optional[str] = None
    user_id: Optional[str] = None


class CommentContentRequest(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_COMMENT_BODY)


@router.get("/ideas/{idea_id}/comments")
async def list_idea_comments(idea_id: str, db: AsyncSession = Depends(get_db)):
    """Visible comments for an idea, nested under their parents."""
    return await list_idea_comments_service(db, idea_id)


@router.get("/ideas/{idea_id}/comments/thread")
async def comment_thread(idea_id: str, db: AsyncSession = Depends(get_db)):
    """Flat thread rows with depth and reply_count, breadth-first."""
    await load_idea(db, idea_id)
    rows = await get_comment_thread(db, idea_id)
    return {"data": rows, "count": len(rows)}


@router.post("/ideas/{idea_id}/comments", status_code=201)
async def create_comment(
    idea_id: str,
    request: CreateCommentRequest,
    _rate_limit: None = Depends(rate_limit("comments_create", limit=60, window_seconds=3600)),
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await create_comment_service(
        db,
        auth,
        idea_id,
        request.content,
        parent_comment_id=request.parent_comment_id,
        user_id=request.user_id,
    )


@router.post("/comments/{comment_id}/reply", status_code=201)
async def reply_to_comment(
    comment_id: str,
    request: CommentContentRequest,
    _rate_limit: None = Depends(rate_limit("comments_create", limit=60, window_seconds=3600)),
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await reply_to_comment_service(db, auth, comment_id, request.content)


@router.patch("/comments/{comment_id}")
async def update_comment(
    comment_id: str,
    request: CommentContentRequest,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await update_comment_service(db, auth, comment_id, request.content)


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: str,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Delete a comment and its replies (owner or service role)."""
    return await delete_comment_service(db, auth, comment_id)


@router.post("/comments/{comment_id}/flag")
async def flag_comment(
    comment_id: str,
    auth: Principal = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await flag_comment_service(db, auth, comment_id)
