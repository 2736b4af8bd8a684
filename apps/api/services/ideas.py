"""Idea catalog reads, admin writes, and view counting."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import String, case, cast, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.idea import DIFFICULTY_LEVELS, Idea
from services.access import Principal, idea_read_predicate, require_idea_write
from services.counters import record_idea_view
from services.errors import ConstraintViolation, NotFound


logger = logging.getLogger(__name__)

IDEA_SORTS = ("popular", "recent", "difficulty", "title")
IDEA_WRITABLE_FIELDS = (
    "title",
    "description",
    "category",
    "difficulty",
    "tools",
    "tags",
    "monetization_potential",
    "estimated_build_time",
    "free_tier",
    "guest_visible",
)
MAX_PAGE_SIZE = 100


def iso_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def pagination_meta(total: int, page: int, limit: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }


def serialize_idea(idea: Idea) -> Dict[str, Any]:
    return {
        "id": idea.id,
        "title": idea.title,
        "description": idea.description,
        "category": idea.category,
        "difficulty": idea.difficulty,
        "tools": list(idea.tools or []),
        "tags": list(idea.tags or []),
        "monetization_potential": idea.monetization_potential,
        "estimated_build_time": idea.estimated_build_time,
        "free_tier": bool(idea.free_tier),
        "guest_visible": bool(idea.guest_visible),
        "view_count": int(idea.view_count or 0),
        "comment_count": int(idea.comment_count or 0),
        "project_count": int(idea.project_count or 0),
        "created_at": iso_or_none(idea.created_at),
        "updated_at": iso_or_none(idea.updated_at),
    }


def _clamp_page(page: Optional[int], limit: Optional[int]) -> tuple:
    safe_page = max(int(page or 1), 1)
    safe_limit = max(1, min(int(limit or 20), MAX_PAGE_SIZE))
    return safe_page, safe_limit


def _order_clause(sort: str):
    if sort == "popular":
        return [Idea.view_count.desc(), Idea.created_at.desc()]
    if sort == "difficulty":
        rank = case(
            {level: index for index, level in enumerate(DIFFICULTY_LEVELS, start=1)},
            value=Idea.difficulty,
            else_=0,
        )
        return [rank.asc(), Idea.title.asc()]
    if sort == "title":
        return [Idea.title.asc()]
    return [Idea.created_at.desc(), Idea.id.asc()]


async def load_idea(db: AsyncSession, idea_id: str, principal: Optional[Principal] = None) -> Idea:
    """Fetch an idea; with a principal, rows hidden by the read predicate are not found."""
    stmt = select(Idea).where(Idea.id == idea_id)
    if principal is not None:
        stmt = stmt.where(idea_read_predicate(principal))
    result = await db.execute(stmt)
    idea = result.scalar_one_or_none()
    if idea is None:
        raise NotFound("Idea not found")
    return idea


async def list_ideas_service(
    db: AsyncSession,
    principal: Principal,
    *,
    page: int = 1,
    limit: int = 20,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "recent",
    free_tier: Optional[bool] = None,
) -> Dict[str, Any]:
    page, limit = _clamp_page(page, limit)
    if sort not in IDEA_SORTS:
        raise ConstraintViolation("sort must be popular, recent, difficulty, or title")
    if difficulty and difficulty not in DIFFICULTY_LEVELS:
        raise ConstraintViolation("difficulty must be Beginner, Intermediate, or Advanced")

    filters = [idea_read_predicate(principal)]
    if free_tier:
        filters.append(Idea.free_tier.is_(True))
    if category:
        filters.append(Idea.category == category.strip())
    if difficulty:
        filters.append(Idea.difficulty == difficulty)
    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        filters.append(
            or_(
                Idea.title.ilike(pattern),
                Idea.description.ilike(pattern),
                cast(Idea.tools, String).ilike(pattern),
                cast(Idea.tags, String).ilike(pattern),
            )
        )

    total = int(
        (await db.execute(select(func.count()).select_from(Idea).where(*filters))).scalar() or 0
    )
    result = await db.execute(
        select(Idea)
        .where(*filters)
        .order_by(*_order_clause(sort))
        .offset((page - 1) * limit)
        .limit(limit)
    )
    ideas = result.scalars().all()

    return {
        "data": [serialize_idea(idea) for idea in ideas],
        "pagination": pagination_meta(total, page, limit),
        "filters": {
            "category": category,
            "difficulty": difficulty,
            "search": term or None,
            "sort": sort,
            "tier": "authenticated" if principal.is_authenticated else "guest",
        },
    }


async def list_free_tier_ideas_service(db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(Idea)
        .where(Idea.free_tier.is_(True))
        .order_by(Idea.title.asc())
        .limit(max(int(settings.FREE_TIER_PREVIEW_LIMIT), 1))
    )
    ideas = result.scalars().all()
    return {"data": [serialize_idea(idea) for idea in ideas], "count": len(ideas)}


async def list_ideas_by_category_service(
    db: AsyncSession,
    principal: Principal,
    category: str,
    *,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    payload = await list_ideas_service(
        db, principal, page=page, limit=limit, category=category, sort="recent"
    )
    return {"data": payload["data"], "pagination": payload["pagination"], "category": category}


async def get_popular_ideas_by_category(
    db: AsyncSession,
    principal: Principal,
    category: str,
    limit: int = 5,
) -> List[Dict[str, Any]]:
    safe_limit = max(1, min(int(limit or 5), 50))
    result = await db.execute(
        select(Idea)
        .where(idea_read_predicate(principal), Idea.category == category)
        .order_by(Idea.view_count.desc(), Idea.project_count.desc())
        .limit(safe_limit)
    )
    return [serialize_idea(idea) for idea in result.scalars().all()]


async def get_idea_service(db: AsyncSession, principal: Principal, idea_id: str) -> Dict[str, Any]:
    idea = await load_idea(db, idea_id, principal)
    return {
        "data": serialize_idea(idea),
        "access": "full" if principal.is_authenticated else "free_tier",
    }


def _writable_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if key in IDEA_WRITABLE_FIELDS}


async def create_idea_service(db: AsyncSession, principal: Principal, payload: Dict[str, Any]) -> Dict[str, Any]:
    require_idea_write(principal)
    idea = Idea(**_writable_fields(payload))
    db.add(idea)
    await db.commit()
    await db.refresh(idea)
    logger.info("idea_created idea=%s category=%s free_tier=%s", idea.id, idea.category, idea.free_tier)
    return serialize_idea(idea)


async def update_idea_service(
    db: AsyncSession,
    principal: Principal,
    idea_id: str,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    require_idea_write(principal)
    idea = await load_idea(db, idea_id)
    changes = _writable_fields(payload)
    for key, value in changes.items():
        setattr(idea, key, value)
    await db.commit()
    await db.refresh(idea)
    logger.info("idea_updated idea=%s fields=%s", idea.id, ",".join(sorted(changes)))
    return serialize_idea(idea)


async def increment_view_count_service(db: AsyncSession, principal: Principal, idea_id: str) -> Dict[str, Any]:
    idea = await load_idea(db, idea_id, principal)
    await record_idea_view(db, idea.id)
    await db.commit()
    await db.refresh(idea)
    return {"id": idea.id, "view_count": int(idea.view_count or 0)}
