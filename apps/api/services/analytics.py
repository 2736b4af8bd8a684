"""Page-view analytics and campaign metrics."""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.comment import Comment
from models.idea import Idea
from models.metric import Metric
from models.page_view import PageView
from models.project_link import ProjectLink
from models.user import User
from services.access import (
    Principal,
    page_view_read_predicate,
    require_metrics_read,
    require_service,
)
from services.counters import record_idea_view
from services.errors import ConstraintViolation
from services.ideas import iso_or_none, load_idea
from services.projects import count_projects, goal_percentage


logger = logging.getLogger(__name__)

GUEST_UNIQUE_ESTIMATE = 0.3
TOP_IDEAS_LIMIT = 10
TOOL_BUCKETS = ("Claude", "Bolt", "Lovable", "Google Studio", "Other")
EXPORT_FORMATS = ("csv", "json")


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _count(db: AsyncSession, model, *filters) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*filters))
    return int(result.scalar() or 0)


# ---------------------------------------------------------------------------
# Page views
# ---------------------------------------------------------------------------

async def record_page_view(
    db: AsyncSession,
    principal: Principal,
    page: str,
    idea_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Append a page view for any role; an idea view also bumps its counter."""
    viewer_id = principal.user_id if principal.is_authenticated else None
    if idea_id:
        await load_idea(db, idea_id)

    view = PageView(user_id=viewer_id, page=page, idea_id=idea_id or None)
    db.add(view)
    await db.flush()
    if idea_id:
        await record_idea_view(db, idea_id)
    await db.commit()
    logger.debug("page_view_recorded page=%s idea=%s user=%s", page, idea_id or "-", viewer_id or "guest")
    return {"id": view.id, "page": view.page, "idea_id": view.idea_id}


async def list_page_views_service(db: AsyncSession, principal: Principal, limit: int = 100) -> Dict[str, Any]:
    require_metrics_read(principal)
    result = await db.execute(
        select(PageView)
        .where(page_view_read_predicate(principal))
        .order_by(PageView.timestamp.desc())
        .limit(max(1, min(int(limit or 100), 500)))
    )
    views = result.scalars().all()
    return {
        "data": [
            {
                "id": view.id,
                "user_id": view.user_id,
                "page": view.page,
                "idea_id": view.idea_id,
                "timestamp": iso_or_none(view.timestamp),
            }
            for view in views
        ],
        "count": len(views),
    }


async def cleanup_old_page_views(db: AsyncSession, days_to_keep: Optional[int] = None) -> int:
    """Delete page views older than the retention window and return how many went."""
    days = int(days_to_keep if days_to_keep is not None else settings.PAGE_VIEW_RETENTION_DAYS)
    if days < 0:
        raise ConstraintViolation("days_to_keep must not be negative")
    cutoff = _now() - timedelta(days=days)
    result = await db.execute(
        delete(PageView).where(PageView.timestamp < cutoff).execution_options(synchronize_session=False)
    )
    await db.commit()
    deleted = int(result.rowcount or 0)
    logger.info("page_views_cleaned days_to_keep=%s deleted=%s", days, deleted)
    return deleted


async def cleanup_page_views_service(db: AsyncSession, principal: Principal, days_to_keep: Optional[int]) -> Dict[str, Any]:
    require_service(principal)
    deleted = await cleanup_old_page_views(db, days_to_keep)
    return {"deleted_count": deleted}


# ---------------------------------------------------------------------------
# Campaign aggregates
# ---------------------------------------------------------------------------

async def get_campaign_metrics(db: AsyncSession) -> Dict[str, Any]:
    """Catalog-wide totals and percent progress toward the projects goal."""
    result = await db.execute(
        select(
            func.coalesce(func.sum(Idea.project_count), 0),
            func.count(Idea.id),
            func.coalesce(func.sum(Idea.comment_count), 0),
            func.coalesce(func.sum(Idea.view_count), 0),
        )
    )
    total_projects, total_ideas, total_comments, total_views = result.one()
    return {
        "total_projects": int(total_projects or 0),
        "total_ideas": int(total_ideas or 0),
        "total_comments": int(total_comments or 0),
        "total_views": int(total_views or 0),
        "goal_progress": goal_percentage(int(total_projects or 0)),
    }


async def get_projects_goal(db: AsyncSession) -> Dict[str, Any]:
    current = await count_projects(db)
    return {
        "current": current,
        "goal": int(settings.CAMPAIGN_PROJECTS_GOAL),
        "percentage": goal_percentage(current),
        "updated_at": _now().isoformat(),
    }


def tool_bucket(tool: str) -> str:
    name = str(tool or "").lower()
    if "claude" in name:
        return "Claude"
    if "bolt" in name:
        return "Bolt"
    if "lovable" in name:
        return "Lovable"
    if "google" in name or "studio" in name:
        return "Google Studio"
    return "Other"


async def get_tool_usage_buckets(db: AsyncSession) -> Dict[str, Any]:
    counts = {bucket: 0 for bucket in TOOL_BUCKETS}
    for tools in (await db.execute(select(ProjectLink.tools_used))).scalars().all():
        for tool in tools or []:
            counts[tool_bucket(tool)] += 1
    return {**counts, "updated_at": _now().isoformat()}


async def _top_ideas(db: AsyncSession, column, key: str) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(Idea.id, Idea.title, column).order_by(column.desc(), Idea.title.asc()).limit(TOP_IDEAS_LIMIT)
    )
    return [{"id": row[0], "title": row[1], key: int(row[2] or 0)} for row in result.all()]


async def unique_visitor_estimate(db: AsyncSession) -> Dict[str, int]:
    total_views = await _count(db, PageView)
    authenticated_views = await _count(db, PageView, PageView.user_id.is_not(None))
    distinct_viewers = int(
        (
            await db.execute(
                select(func.count(func.distinct(PageView.user_id))).where(PageView.user_id.is_not(None))
            )
        ).scalar()
        or 0
    )
    guest_views = total_views - authenticated_views
    return {
        "total_page_views": total_views,
        "unique_visitors": distinct_viewers + int(round(guest_views * GUEST_UNIQUE_ESTIMATE)),
    }


async def get_dashboard_metrics(db: AsyncSession, principal: Principal) -> Dict[str, Any]:
    require_metrics_read(principal)
    total_projects = await count_projects(db)
    visitors = await unique_visitor_estimate(db)
    week_ago = _now() - timedelta(days=7)
    return {
        "total_registrations": await _count(db, User),
        "total_projects": total_projects,
        "total_comments": await _count(db, Comment),
        "total_page_views": visitors["total_page_views"],
        "unique_visitors": visitors["unique_visitors"],
        "projects_goal_progress": {
            "current": total_projects,
            "goal": int(settings.CAMPAIGN_PROJECTS_GOAL),
            "percentage": goal_percentage(total_projects),
        },
        "recent_registrations": await _count(db, User, User.created_at >= week_ago),
        "most_viewed_ideas": await _top_ideas(db, Idea.view_count, "view_count"),
        "most_commented_ideas": await _top_ideas(db, Idea.comment_count, "comment_count"),
        "most_built_ideas": await _top_ideas(db, Idea.project_count, "project_count"),
        "updated_at": _now().isoformat(),
    }


def render_metrics_csv(metrics: Dict[str, Any]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Metric", "Value"])
    writer.writerow(["Export Timestamp", metrics["export_timestamp"]])
    writer.writerow(["Total Registrations", metrics["total_registrations"]])
    writer.writerow(["Total Projects", metrics["total_projects"]])
    writer.writerow(["Total Comments", metrics["total_comments"]])
    writer.writerow(["Total Page Views", metrics["total_page_views"]])
    writer.writerow(["Unique Visitors", metrics["unique_visitors"]])
    writer.writerow(["Projects Goal", metrics["projects_goal"]])
    writer.writerow(["Projects Goal Percentage", f"{metrics['projects_goal_percentage']}%"])
    writer.writerow(["Recent Registrations (7 days)", metrics["recent_registrations_7d"]])
    for heading, rows, key, label in (
        ("Most Viewed Ideas", metrics["most_viewed_ideas"], "view_count", "View Count"),
        ("Most Commented Ideas", metrics["most_commented_ideas"], "comment_count", "Comment Count"),
        ("Most Built Ideas", metrics["most_built_ideas"], "project_count", "Project Count"),
    ):
        writer.writerow([])
        writer.writerow([heading])
        writer.writerow(["ID", "Title", label])
        for row in rows:
            writer.writerow([row["id"], row["title"], row[key]])
    return buffer.getvalue()


async def export_metrics_service(db: AsyncSession, principal: Principal, export_format: str = "json") -> Dict[str, Any]:
    if export_format not in EXPORT_FORMATS:
        raise ConstraintViolation("Format must be csv or json")
    dashboard = await get_dashboard_metrics(db, principal)
    metrics = {
        "export_timestamp": dashboard["updated_at"],
        "total_registrations": dashboard["total_registrations"],
        "total_projects": dashboard["total_projects"],
        "total_comments": dashboard["total_comments"],
        "total_page_views": dashboard["total_page_views"],
        "unique_visitors": dashboard["unique_visitors"],
        "projects_goal": dashboard["projects_goal_progress"]["goal"],
        "projects_goal_percentage": dashboard["projects_goal_progress"]["percentage"],
        "recent_registrations_7d": dashboard["recent_registrations"],
        "most_viewed_ideas": dashboard["most_viewed_ideas"],
        "most_commented_ideas": dashboard["most_commented_ideas"],
        "most_built_ideas": dashboard["most_built_ideas"],
    }
    logger.info("metrics_exported format=%s by=%s", export_format, principal.user_id or principal.role)
    if export_format == "csv":
        return {"format": "csv", "content": render_metrics_csv(metrics)}
    return {"format": "json", "content": metrics}


async def list_daily_metrics_service(
    db: AsyncSession,
    principal: Principal,
    metric_key: Optional[str] = None,
    days: int = 30,
) -> Dict[str, Any]:
    require_metrics_read(principal)
    window = max(1, min(int(days or 30), 365))
    since = (_now() - timedelta(days=window - 1)).date()
    filters = [Metric.date >= since]
    if metric_key:
        filters.append(Metric.metric_key == metric_key)
    result = await db.execute(
        select(Metric).where(*filters).order_by(Metric.date.asc(), Metric.metric_key.asc())
    )
    rows = result.scalars().all()
    return {
        "data": [
            {
                "metric_key": row.metric_key,
                "metric_value": float(row.metric_value or 0),
                "date": row.date.isoformat() if row.date else None,
            }
            for row in rows
        ],
        "count": len(rows),
        "days": window,
    }
