"""Denormalized counter and daily metric maintenance.

Every helper issues its statements on the caller's session without
committing, so counter changes commit or roll back together with the insert
or delete that caused them. Increments are single ``UPDATE ... SET n = n + 1``
statements; concurrent writers serialize on the row lock instead of racing
on a read-modify-write.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import case, func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.constraints import require_text
from models.idea import Idea
from models.metric import Metric


logger = logging.getLogger(__name__)

COUNTER_FIELDS = ("view_count", "comment_count", "project_count")

METRIC_PROJECTS_TOTAL = "projects_total"
METRIC_COMMENTS_TOTAL = "comments_total"
METRIC_REGISTRATIONS_TOTAL = "registrations_total"
TOOL_METRIC_PREFIX = "tool_"


def _today() -> date:
    return datetime.now(timezone.utc).date()


def normalize_tool_key(tool: str) -> str:
    """Map a free-text tool name to its metric key ('Google AI Studio' -> 'tool_google_ai_studio')."""
    token = re.sub(r"[^a-z0-9]+", "_", str(tool or "").strip().lower()).strip("_")
    if not token:
        return ""
    return f"{TOOL_METRIC_PREFIX}{token}"


def tool_metric_keys(tools: Optional[Iterable[str]]) -> List[str]:
    keys: List[str] = []
    for tool in tools or []:
        key = normalize_tool_key(tool)
        if key and key not in keys:
            keys.append(key)
    return keys


async def adjust_idea_counter(db: AsyncSession, idea_id: str, field: str, delta: int) -> None:
    """Atomically add ``delta`` to an idea counter, flooring decrements at zero."""
    if field not in COUNTER_FIELDS:
        raise ValueError(f"Unknown idea counter: {field}")
    if delta == 0:
        return

    column = getattr(Idea, field)
    if delta > 0:
        new_value = column + delta
    else:
        new_value = case((column + delta < 0, 0), else_=column + delta)

    await db.execute(
        update(Idea).where(Idea.id == idea_id).values({field: new_value})
    )


async def upsert_daily_metric(
    db: AsyncSession,
    metric_key: str,
    delta: float = 1,
    day: Optional[date] = None,
) -> None:
    """Add ``delta`` to the (metric_key, day) row, creating it when missing."""
    key = require_text("metric_key", metric_key, 100)
    metric_day = day or _today()
    dialect = db.get_bind().dialect.name

    if dialect in ("postgresql", "sqlite"):
        insert_fn = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = insert_fn(Metric).values(
            id=str(uuid.uuid4()),
            metric_key=key,
            metric_value=delta,
            date=metric_day,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Metric.metric_key, Metric.date],
            set_={
                "metric_value": Metric.metric_value + delta,
                "timestamp": func.now(),
            },
        )
        await db.execute(stmt)
        return

    result = await db.execute(
        select(Metric).where(Metric.metric_key == key, Metric.date == metric_day)
    )
    row = result.scalar_one_or_none()
    if row is None:
        db.add(Metric(id=str(uuid.uuid4()), metric_key=key, metric_value=delta, date=metric_day))
    else:
        row.metric_value = (row.metric_value or 0) + delta
    await db.flush()


async def record_project_created(db: AsyncSession, idea_id: str, tools_used: Optional[Iterable[str]]) -> None:
    await adjust_idea_counter(db, idea_id, "project_count", 1)
    await upsert_daily_metric(db, METRIC_PROJECTS_TOTAL, 1)
    for key in tool_metric_keys(tools_used):
        await upsert_daily_metric(db, key, 1)


async def record_project_deleted(db: AsyncSession, idea_id: str) -> None:
    await adjust_idea_counter(db, idea_id, "project_count", -1)


async def record_comments_created(db: AsyncSession, idea_id: str, count: int = 1) -> None:
    await adjust_idea_counter(db, idea_id, "comment_count", count)
    await upsert_daily_metric(db, METRIC_COMMENTS_TOTAL, count)


async def record_comments_deleted(db: AsyncSession, idea_id: str, count: int) -> None:
    await adjust_idea_counter(db, idea_id, "comment_count", -abs(count))


async def record_idea_view(db: AsyncSession, idea_id: str) -> None:
    await adjust_idea_counter(db, idea_id, "view_count", 1)


async def record_registration(db: AsyncSession) -> None:
    await upsert_daily_metric(db, METRIC_REGISTRATIONS_TOTAL, 1)
