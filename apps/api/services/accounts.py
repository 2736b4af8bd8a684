"""Identity issuance and account removal.

Registration creates the opaque identity id and its profile row in one
transaction, so a profile always exists for every issued identity.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.comment import Comment
from models.constraints import require_email
from models.page_view import PageView
from models.project_link import ProjectLink
from models.user import User
from services.access import Principal, require_service
from services.comments import remove_comment_subtree
from services.counters import record_registration
from services.errors import NotFound, UniquenessViolation
from services.profiles import load_user, serialize_profile
from services.projects import remove_project
from services.session_token import create_session_token


logger = logging.getLogger(__name__)


async def _find_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_identity_service(
    db: AsyncSession,
    email: str,
    display_name: Optional[str] = None,
) -> Dict[str, Any]:
    normalized_email = require_email(email).lower()
    if await _find_by_email(db, normalized_email):
        raise UniquenessViolation("An account with this email already exists")

    user = User(
        id=str(uuid.uuid4()),
        email=normalized_email,
        display_name=(display_name or "").strip() or None,
        tier="free",
    )
    db.add(user)
    await db.flush()
    await record_registration(db)
    await db.commit()
    await db.refresh(user)

    session = create_session_token(user.id, email=user.email)
    logger.info("identity_registered user=%s", user.id)
    return {
        "user": serialize_profile(user, include_email=True),
        "session_token": session["token"],
        "session_expires_at": session["expires_at"],
    }


async def issue_session_service(db: AsyncSession, principal: Principal, email: str) -> Dict[str, Any]:
    """Mint a session for an existing identity on behalf of the identity provider."""
    require_service(principal)
    user = await _find_by_email(db, require_email(email).lower())
    if user is None:
        raise NotFound("User not found")
    session = create_session_token(user.id, email=user.email)
    return {
        "user_id": user.id,
        "session_token": session["token"],
        "session_expires_at": session["expires_at"],
    }


async def get_current_user_service(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    user = await load_user(db, user_id)
    return serialize_profile(user, include_email=True)


async def delete_user_service(db: AsyncSession, principal: Principal, user_id: str) -> Dict[str, Any]:
    """Remove a user, keeping idea counters in step and anonymizing their page views."""
    require_service(principal)
    user = await load_user(db, user_id)

    removed_comments = 0
    while True:
        # Re-query each pass: removing a subtree can take later rows with it.
        result = await db.execute(
            select(Comment).where(Comment.user_id == user.id).order_by(Comment.created_at.asc()).limit(1)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            break
        removed_comments += await remove_comment_subtree(db, comment)

    projects = (
        await db.execute(select(ProjectLink).where(ProjectLink.user_id == user.id))
    ).scalars().all()
    for project in projects:
        await remove_project(db, project)

    await db.execute(
        update(PageView)
        .where(PageView.user_id == user.id)
        .values(user_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.delete(user)
    await db.commit()

    logger.info(
        "user_deleted user=%s comments_removed=%s projects_removed=%s",
        user_id,
        removed_comments,
        len(projects),
    )
    return {"id": user_id, "comments_removed": removed_comments, "projects_removed": len(projects)}
