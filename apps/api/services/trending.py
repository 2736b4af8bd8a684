"""Trending ideas over a recent activity window."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.comment import Comment
from models.idea import Idea
from models.page_view import PageView
from models.project_link import ProjectLink
from services.access import Principal, idea_read_predicate


logger = logging.getLogger(__name__)

VIEW_WEIGHT = 1
COMMENT_WEIGHT = 5
PROJECT_WEIGHT = 10
MAX_DAYS_BACK = 365
MAX_LIMIT = 50


def trend_score(views: int, comments: int, projects: int) -> int:
    return views * VIEW_WEIGHT + comments * COMMENT_WEIGHT + projects * PROJECT_WEIGHT


async def _counts_since(db: AsyncSession, id_column, time_column, cutoff: datetime) -> Dict[str, int]:
    result = await db.execute(
        select(id_column, func.count())
        .where(id_column.is_not(None), time_column >= cutoff)
        .group_by(id_column)
    )
    return {row[0]: int(row[1]) for row in result.all()}


async def get_trending_ideas(
    db: AsyncSession,
    principal: Principal,
    days_back: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Score readable ideas by recent views, comments and projects; idle ideas are dropped."""
    days = max(1, min(int(days_back or settings.TRENDING_DEFAULT_DAYS), MAX_DAYS_BACK))
    top_n = max(1, min(int(limit or settings.TRENDING_DEFAULT_LIMIT), MAX_LIMIT))
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)

    views = await _counts_since(db, PageView.idea_id, PageView.timestamp, cutoff)
    comments = await _counts_since(db, Comment.idea_id, Comment.created_at, cutoff)
    projects = await _counts_since(db, ProjectLink.idea_id, ProjectLink.created_at, cutoff)

    active_ids = set(views) | set(comments) | set(projects)
    if not active_ids:
        return []

    result = await db.execute(
        select(Idea.id, Idea.title, Idea.category).where(
            Idea.id.in_(active_ids), idea_read_predicate(principal)
        )
    )
    rows = []
    for idea_id, title, category in result.all():
        recent_views = views.get(idea_id, 0)
        recent_comments = comments.get(idea_id, 0)
        recent_projects = projects.get(idea_id, 0)
        rows.append(
            {
                "id": idea_id,
                "title": title,
                "category": category,
                "recent_views": recent_views,
                "recent_comments": recent_comments,
                "recent_projects": recent_projects,
                "trend_score": trend_score(recent_views, recent_comments, recent_projects),
            }
        )

    rows.sort(key=lambda row: (-row["trend_score"], -row["recent_views"], row["title"]))
    logger.info("trending_computed days=%s limit=%s candidates=%s", days, top_n, len(rows))
    return rows[:top_n]
