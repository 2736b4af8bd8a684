"""Threaded comments: assembly, authoring, moderation and counter upkeep."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.comment import Comment
from models.user import User
from services.access import Principal, check_insert_owner, require_owner
from services.counters import record_comments_created, record_comments_deleted
from services.errors import ConstraintViolation, NotFound, PermissionDenied
from services.ideas import iso_or_none, load_idea
from services.profiles import load_user


logger = logging.getLogger(__name__)


def serialize_comment(comment: Comment, display_name: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "idea_id": comment.idea_id,
        "user_id": comment.user_id,
        "parent_comment_id": comment.parent_comment_id,
        "content": comment.content,
        "flagged_for_moderation": bool(comment.flagged_for_moderation),
        "created_at": iso_or_none(comment.created_at),
        "updated_at": iso_or_none(comment.updated_at),
        "user": {"display_name": display_name},
    }


def _chronological(comment: Comment):
    return (comment.created_at is None, comment.created_at, comment.id)


def assemble_thread(comments: Iterable[Comment], display_names: Dict[str, Optional[str]]) -> List[Dict[str, Any]]:
    """Flatten a comment forest breadth-first by depth, chronological within a depth.

    A flagged comment is dropped together with its whole subtree, and
    ``reply_count`` counts only the visible direct replies.
    """
    children: Dict[Optional[str], List[Comment]] = defaultdict(list)
    for comment in comments:
        if comment.flagged_for_moderation:
            continue
        children[comment.parent_comment_id].append(comment)
    for siblings in children.values():
        siblings.sort(key=_chronological)

    rows: List[Dict[str, Any]] = []
    level = list(children.get(None, []))
    depth = 0
    while level:
        level.sort(key=_chronological)
        next_level: List[Comment] = []
        for comment in level:
            replies = children.get(comment.id, [])
            rows.append(
                {
                    "id": comment.id,
                    "idea_id": comment.idea_id,
                    "user_id": comment.user_id,
                    "parent_comment_id": comment.parent_comment_id,
                    "content": comment.content,
                    "created_at": iso_or_none(comment.created_at),
                    "updated_at": iso_or_none(comment.updated_at),
                    "user_display_name": display_names.get(comment.user_id),
                    "reply_count": len(replies),
                    "depth": depth,
                }
            )
            next_level.extend(replies)
        level = next_level
        depth += 1
    return rows


def build_comment_tree(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Nest flat thread rows under their parents, preserving row order."""
    nodes: Dict[str, Dict[str, Any]] = {}
    roots: List[Dict[str, Any]] = []
    for row in rows:
        nodes[row["id"]] = {**row, "replies": []}
    for row in rows:
        node = nodes[row["id"]]
        parent_id = row.get("parent_comment_id")
        if parent_id is None:
            roots.append(node)
        elif parent_id in nodes:
            nodes[parent_id]["replies"].append(node)
    return roots


async def _idea_comments_with_names(db: AsyncSession, idea_id: str):
    result = await db.execute(
        select(Comment, User.display_name)
        .join(User, User.id == Comment.user_id)
        .where(Comment.idea_id == idea_id)
    )
    comments: List[Comment] = []
    display_names: Dict[str, Optional[str]] = {}
    for comment, display_name in result.all():
        comments.append(comment)
        display_names[comment.user_id] = display_name
    return comments, display_names


async def get_comment_thread(db: AsyncSession, idea_id: str) -> List[Dict[str, Any]]:
    comments, display_names = await _idea_comments_with_names(db, idea_id)
    return assemble_thread(comments, display_names)


async def list_idea_comments_service(db: AsyncSession, idea_id: str) -> Dict[str, Any]:
    await load_idea(db, idea_id)
    rows = await get_comment_thread(db, idea_id)
    return {"data": build_comment_tree(rows), "count": len(rows)}


async def load_comment(db: AsyncSession, comment_id: str) -> Comment:
    result = await db.execute(select(Comment).where(Comment.id == comment_id))
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFound("Comment not found")
    return comment


async def create_comment_service(
    db: AsyncSession,
    principal: Principal,
    idea_id: str,
    content: str,
    *,
    parent_comment_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    author_id = check_insert_owner(principal, user_id)
    author = await load_user(db, author_id)
    idea = await load_idea(db, idea_id, principal)
    if parent_comment_id:
        parent = await load_comment(db, parent_comment_id)
        if parent.idea_id != idea.id:
            raise ConstraintViolation("Parent comment belongs to a different idea")

    comment = Comment(
        idea_id=idea.id,
        user_id=author_id,
        parent_comment_id=parent_comment_id or None,
        content=content,
        flagged_for_moderation=False,
    )
    db.add(comment)
    await db.flush()
    await record_comments_created(db, idea.id)
    await db.commit()
    await db.refresh(comment)

    logger.info(
        "comment_created user=%s idea=%s comment=%s parent=%s",
        author_id,
        idea.id,
        comment.id,
        parent_comment_id or "-",
    )
    return serialize_comment(comment, author.display_name)


async def reply_to_comment_service(
    db: AsyncSession,
    principal: Principal,
    parent_comment_id: str,
    content: str,
) -> Dict[str, Any]:
    parent = await load_comment(db, parent_comment_id)
    return await create_comment_service(
        db,
        principal,
        parent.idea_id,
        content,
        parent_comment_id=parent.id,
    )


async def update_comment_service(
    db: AsyncSession,
    principal: Principal,
    comment_id: str,
    content: str,
) -> Dict[str, Any]:
    comment = await load_comment(db, comment_id)
    require_owner(principal, comment.user_id, allow_service=False)
    comment.content = content
    await db.commit()
    await db.refresh(comment)
    author = await load_user(db, comment.user_id)
    logger.info("comment_updated user=%s comment=%s", comment.user_id, comment.id)
    return serialize_comment(comment, author.display_name)


def descendant_ids(root_id: str, pairs: Iterable[tuple]) -> List[str]:
    """Ids of ``root_id`` and everything below it, given (id, parent_id) pairs."""
    children: Dict[Optional[str], List[str]] = defaultdict(list)
    for comment_id, parent_id in pairs:
        children[parent_id].append(comment_id)
    collected = [root_id]
    index = 0
    while index < len(collected):
        collected.extend(children.get(collected[index], []))
        index += 1
    return collected


async def remove_comment_subtree(db: AsyncSession, comment: Comment) -> int:
    """Delete a comment with all of its replies and decrement the idea counter; no commit."""
    result = await db.execute(
        select(Comment.id, Comment.parent_comment_id).where(Comment.idea_id == comment.idea_id)
    )
    ids = descendant_ids(comment.id, result.all())
    await db.execute(delete(Comment).where(Comment.id.in_(ids)))
    await record_comments_deleted(db, comment.idea_id, len(ids))
    return len(ids)


async def delete_comment_service(db: AsyncSession, principal: Principal, comment_id: str) -> Dict[str, Any]:
    comment = await load_comment(db, comment_id)
    require_owner(principal, comment.user_id)
    idea_id = comment.idea_id
    removed = await remove_comment_subtree(db, comment)
    await db.commit()
    logger.info("comment_deleted comment=%s idea=%s removed=%s", comment_id, idea_id, removed)
    return {"id": comment_id, "deleted_count": removed}


async def flag_comment_service(db: AsyncSession, principal: Principal, comment_id: str) -> Dict[str, Any]:
    if not principal.is_authenticated:
        raise PermissionDenied("Authentication required")
    comment = await load_comment(db, comment_id)
    comment.flagged_for_moderation = True
    await db.commit()
    logger.info("comment_flagged comment=%s by=%s", comment.id, principal.user_id or principal.role)
    return {"id": comment.id, "flagged_for_moderation": True}


async def list_user_comments_service(db: AsyncSession, user_id: str, limit: int = 50) -> Dict[str, Any]:
    author = await load_user(db, user_id)
    result = await db.execute(
        select(Comment)
        .where(Comment.user_id == user_id, Comment.flagged_for_moderation.is_(False))
        .order_by(Comment.created_at.desc())
        .limit(max(1, min(int(limit or 50), 100)))
    )
    comments = result.scalars().all()
    return {
        "data": [serialize_comment(comment, author.display_name) for comment in comments],
        "count": len(comments),
    }
