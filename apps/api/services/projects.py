"""Project links: user submissions built from catalog ideas."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.idea import Idea
from models.project_link import ProjectLink
from models.user import User
from services.access import Principal, check_insert_owner, require_owner
from services.counters import record_project_created, record_project_deleted
from services.errors import ConstraintViolation, NotFound
from services.ideas import iso_or_none, load_idea
from services.profiles import load_user


logger = logging.getLogger(__name__)

PROJECT_WRITABLE_FIELDS = ("title", "url", "description", "tools_used")
CAMPAIGN_TOOLS = ("Claude", "Bolt", "Lovable")


def goal_percentage(current: int, goal: Optional[int] = None) -> float:
    target = int(goal if goal is not None else settings.CAMPAIGN_PROJECTS_GOAL)
    if target <= 0:
        return 0.0
    return round(current / target * 100, 2)


def serialize_project(project: ProjectLink, display_name: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": project.id,
        "idea_id": project.idea_id,
        "user_id": project.user_id,
        "title": project.title,
        "url": project.url,
        "description": project.description,
        "tools_used": list(project.tools_used or []),
        "created_at": iso_or_none(project.created_at),
        "updated_at": iso_or_none(project.updated_at),
        "user": {"display_name": display_name},
    }


async def load_project(db: AsyncSession, project_id: str) -> ProjectLink:
    result = await db.execute(select(ProjectLink).where(ProjectLink.id == project_id))
    project = result.scalar_one_or_none()
    if project is None:
        raise NotFound("Project link not found")
    return project


async def _list_projects(db: AsyncSession, *filters) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(ProjectLink, User.display_name)
        .join(User, User.id == ProjectLink.user_id)
        .where(*filters)
        .order_by(ProjectLink.created_at.desc(), ProjectLink.id.asc())
    )
    return [serialize_project(project, display_name) for project, display_name in result.all()]


async def list_idea_projects_service(db: AsyncSession, idea_id: str) -> Dict[str, Any]:
    await load_idea(db, idea_id)
    projects = await _list_projects(db, ProjectLink.idea_id == idea_id)
    return {"data": projects, "count": len(projects)}


async def list_user_projects_service(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    await load_user(db, user_id)
    projects = await _list_projects(db, ProjectLink.user_id == user_id)
    return {"data": projects, "count": len(projects)}


async def create_project_service(
    db: AsyncSession,
    principal: Principal,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    owner_id = check_insert_owner(principal, payload.get("user_id"))
    owner = await load_user(db, owner_id)
    idea = await load_idea(db, str(payload.get("idea_id") or ""), principal)

    project = ProjectLink(
        idea_id=idea.id,
        user_id=owner_id,
        title=payload.get("title"),
        url=payload.get("url"),
        description=payload.get("description"),
        tools_used=payload.get("tools_used") or [],
    )
    db.add(project)
    await db.flush()
    await record_project_created(db, idea.id, project.tools_used)
    await db.commit()
    await db.refresh(project)

    logger.info(
        "project_link_created user=%s idea=%s project=%s tools=%s",
        owner_id,
        idea.id,
        project.id,
        len(project.tools_used or []),
    )
    return serialize_project(project, owner.display_name)


async def update_project_service(
    db: AsyncSession,
    principal: Principal,
    project_id: str,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    project = await load_project(db, project_id)
    require_owner(principal, project.user_id)
    changes = {
        key: value
        for key, value in payload.items()
        if key in PROJECT_WRITABLE_FIELDS and (value is not None or key == "description")
    }
    if not changes:
        raise ConstraintViolation("At least one field must be provided for update")
    for key, value in changes.items():
        setattr(project, key, value)
    await db.commit()
    await db.refresh(project)
    owner = await load_user(db, project.user_id)
    logger.info("project_link_updated project=%s fields=%s", project.id, ",".join(sorted(changes)))
    return serialize_project(project, owner.display_name)


async def remove_project(db: AsyncSession, project: ProjectLink) -> None:
    """Delete a project link and decrement its idea counter; no commit."""
    idea_id = project.idea_id
    await db.delete(project)
    await db.flush()
    await record_project_deleted(db, idea_id)


async def delete_project_service(db: AsyncSession, principal: Principal, project_id: str) -> Dict[str, Any]:
    project = await load_project(db, project_id)
    require_owner(principal, project.user_id)
    idea_id = project.idea_id
    await remove_project(db, project)
    await db.commit()
    logger.info("project_link_deleted project=%s idea=%s", project_id, idea_id)
    return {"id": project_id, "deleted": True}


async def get_tool_usage_stats(db: AsyncSession) -> List[Dict[str, Any]]:
    """Per-tool usage counts across every project link, most used first."""
    tool_lists = (await db.execute(select(ProjectLink.tools_used))).scalars().all()
    counter: Counter = Counter()
    for tools in tool_lists:
        counter.update(tools or [])
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return [{"tool_name": tool, "usage_count": count} for tool, count in ranked]


async def get_project_stats_service(db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(ProjectLink.tools_used, Idea.category).join(Idea, Idea.id == ProjectLink.idea_id)
    )
    rows = result.all()

    tool_stats: Counter = Counter()
    category_stats: Counter = Counter()
    for tools, category in rows:
        tool_stats.update(str(tool).strip() for tool in (tools or []))
        if category:
            category_stats[category] += 1

    breakdown = {tool.lower(): tool_stats.get(tool, 0) for tool in CAMPAIGN_TOOLS}
    breakdown["other"] = sum(
        count for tool, count in tool_stats.items() if tool not in CAMPAIGN_TOOLS
    )
    total = len(rows)
    return {
        "total_projects": total,
        "campaign_goal": int(settings.CAMPAIGN_PROJECTS_GOAL),
        "progress_percentage": goal_percentage(total),
        "tools": {"breakdown": breakdown, "all_tools": dict(tool_stats)},
        "categories": dict(category_stats),
    }


async def count_projects(db: AsyncSession) -> int:
    return int((await db.execute(select(func.count()).select_from(ProjectLink))).scalar() or 0)
