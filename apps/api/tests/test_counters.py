from datetime import date

import pytest
from sqlalchemy.future import select

from factories import add_idea, add_user, fetch_idea
from models.metric import Metric
from services.access import ROLE_AUTHENTICATED, Principal
from services.counters import (
    adjust_idea_counter,
    normalize_tool_key,
    tool_metric_keys,
    upsert_daily_metric,
)
from services.errors import NotFound
from services.projects import create_project_service, delete_project_service


BUILDER = Principal(role=ROLE_AUTHENTICATED, user_id="builder-1")


def _project_payload(idea_id, **overrides):
    payload = {
        "idea_id": idea_id,
        "title": "My build",
        "url": "https://example.com/build",
        "description": "Shipped over a weekend.",
        "tools_used": ["Claude", "Bolt"],
    }
    payload.update(overrides)
    return payload


async def _metrics(session_maker):
    async with session_maker() as session:
        rows = (await session.execute(select(Metric))).scalars().all()
        return {(row.metric_key, row.date): row.metric_value for row in rows}


def test_normalize_tool_key_collapses_separators():
    assert normalize_tool_key("Google AI Studio") == "tool_google_ai_studio"
    assert normalize_tool_key("  Claude  ") == "tool_claude"
    assert normalize_tool_key("Bolt.new") == "tool_bolt_new"
    assert normalize_tool_key("   ") == ""


def test_tool_metric_keys_skip_blanks_and_duplicates():
    assert tool_metric_keys(["Claude", "claude", "", "Lovable"]) == ["tool_claude", "tool_lovable"]
    assert tool_metric_keys(None) == []


@pytest.mark.asyncio
async def test_counter_decrement_floors_at_zero(session_maker, db_session):
    idea = await add_idea(session_maker, project_count=1)

    await adjust_idea_counter(db_session, idea.id, "project_count", -1)
    await adjust_idea_counter(db_session, idea.id, "project_count", -1)
    await adjust_idea_counter(db_session, idea.id, "project_count", -5)
    await db_session.commit()

    refreshed = await fetch_idea(session_maker, idea.id)
    assert refreshed.project_count == 0


@pytest.mark.asyncio
async def test_unknown_counter_field_is_rejected(db_session):
    with pytest.raises(ValueError):
        await adjust_idea_counter(db_session, "missing", "like_count", 1)


@pytest.mark.asyncio
async def test_daily_metric_upsert_keeps_one_row_per_key_and_date(session_maker, db_session):
    day = date(2026, 10, 1)
    await upsert_daily_metric(db_session, "projects_total", 1, day)
    await upsert_daily_metric(db_session, "projects_total", 2, day)
    await upsert_daily_metric(db_session, "projects_total", 1, date(2026, 10, 2))
    await db_session.commit()

    metrics = await _metrics(session_maker)
    assert metrics[("projects_total", day)] == 3
    assert metrics[("projects_total", date(2026, 10, 2))] == 1
    assert len(metrics) == 2


@pytest.mark.asyncio
async def test_project_insert_delete_round_trip(session_maker, db_session):
    await add_user(session_maker, BUILDER.user_id)
    idea = await add_idea(session_maker)

    created = await create_project_service(db_session, BUILDER, _project_payload(idea.id))
    assert (await fetch_idea(session_maker, idea.id)).project_count == 1

    await delete_project_service(db_session, BUILDER, created["id"])
    assert (await fetch_idea(session_maker, idea.id)).project_count == 0

    with pytest.raises(NotFound):
        await delete_project_service(db_session, BUILDER, created["id"])
    assert (await fetch_idea(session_maker, idea.id)).project_count == 0


@pytest.mark.asyncio
async def test_project_insert_writes_daily_and_tool_metrics(session_maker, db_session):
    await add_user(session_maker, BUILDER.user_id)
    idea = await add_idea(session_maker)

    await create_project_service(
        db_session,
        BUILDER,
        _project_payload(idea.id, tools_used=["Claude", "Google AI Studio", "claude"]),
    )
    await create_project_service(db_session, BUILDER, _project_payload(idea.id, tools_used=["Claude"]))

    totals = {}
    for (key, _day), value in (await _metrics(session_maker)).items():
        totals[key] = totals.get(key, 0) + value
    assert totals["projects_total"] == 2
    assert totals["tool_claude"] == 2
    assert totals["tool_google_ai_studio"] == 1


@pytest.mark.asyncio
async def test_interleaved_sessions_do_not_lose_project_count_updates(session_maker):
    await add_user(session_maker, BUILDER.user_id)
    idea = await add_idea(session_maker)

    async with session_maker() as first, session_maker() as second:
        # Both sessions observe project_count == 0 before either writes.
        assert (await first.get(type(idea), idea.id)).project_count == 0
        assert (await second.get(type(idea), idea.id)).project_count == 0

        await create_project_service(first, BUILDER, _project_payload(idea.id, title="First build"))
        await create_project_service(second, BUILDER, _project_payload(idea.id, title="Second build"))

    refreshed = await fetch_idea(session_maker, idea.id)
    assert refreshed.project_count == 2
