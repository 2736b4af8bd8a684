"""User profile reads, owner updates, and per-user statistics."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.comment import Comment
from models.project_link import ProjectLink
from models.user import User
from services.access import Principal, require_authenticated
from services.errors import NotFound
from services.ideas import iso_or_none


logger = logging.getLogger(__name__)

PROFILE_WRITABLE_FIELDS = ("display_name", "bio")


def serialize_profile(user: User, *, include_email: bool = False) -> Dict[str, Any]:
    payload = {
        "id": user.id,
        "display_name": user.display_name,
        "bio": user.bio,
        "tier": user.tier,
        "created_at": iso_or_none(user.created_at),
        "updated_at": iso_or_none(user.updated_at),
    }
    if include_email:
        payload["email"] = user.email
    return payload


async def load_user(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


async def get_profile_service(db: AsyncSession, principal: Principal, user_id: str) -> Dict[str, Any]:
    user = await load_user(db, user_id)
    is_self = principal.user_id == user.id or principal.is_service
    return serialize_profile(user, include_email=is_self)


async def update_profile_service(
    db: AsyncSession,
    principal: Principal,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    user_id = require_authenticated(principal)
    user = await load_user(db, user_id)
    changes = {key: value for key, value in payload.items() if key in PROFILE_WRITABLE_FIELDS}
    for key, value in changes.items():
        setattr(user, key, value)
    await db.commit()
    await db.refresh(user)
    logger.info("profile_updated user=%s fields=%s", user.id, ",".join(sorted(changes)))
    return serialize_profile(user, include_email=True)


async def get_user_stats(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    """Comment and project totals, member-since, and the three most used tools."""
    user = await load_user(db, user_id)
    total_comments = (
        await db.execute(select(func.count()).select_from(Comment).where(Comment.user_id == user_id))
    ).scalar() or 0
    tool_lists = (
        await db.execute(select(ProjectLink.tools_used).where(ProjectLink.user_id == user_id))
    ).scalars().all()

    tool_counter: Counter = Counter()
    for tools in tool_lists:
        tool_counter.update(tool for tool in (tools or []) if str(tool).strip())

    return {
        "total_comments": int(total_comments),
        "total_projects": len(tool_lists),
        "member_since": iso_or_none(user.created_at),
        "favorite_tools": [tool for tool, _count in tool_counter.most_common(3)],
    }
