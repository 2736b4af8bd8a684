from datetime import datetime, timedelta, timezone

import pytest

from factories import add_idea, add_user, auth_header
from models.comment import Comment
from models.page_view import PageView
from models.project_link import ProjectLink
from services.search import query_terms, score_document, stem
from services.trending import trend_score


MEMBER_ID = "search-member"
MEMBER_HEADER = auth_header(MEMBER_ID)


def test_stem_handles_common_plurals():
    assert stem("libraries") == "library"
    assert stem("boxes") == "box"
    assert stem("apps") == "app"
    assert stem("class") == "class"
    assert stem("bus") == "bus"


def test_query_terms_drop_stop_words_and_duplicates():
    assert query_terms("The best apps for the kitchen apps") == ["best", "app", "kitchen"]
    assert query_terms("the and of") == []
    assert query_terms("") == []


def test_score_requires_every_term_and_prefers_title_hits():
    terms = query_terms("recipe generator")
    title_hit = score_document(terms, "Recipe Generator", "Cook with what you have.")
    description_hit = score_document(terms, "Kitchen Helper", "A recipe generator for your fridge.")
    assert title_hit > description_hit > 0
    assert score_document(terms, "Recipe Box", "Store family recipes.") == 0.0
    assert score_document([], "Recipe Generator", "") == 0.0


@pytest.mark.asyncio
async def test_search_ranks_title_matches_first(ideahub_client):
    client, session_maker = ideahub_client
    await add_idea(
        session_maker,
        title="Budget Dashboard",
        description="Track spending with charts and a monthly budget planner.",
        free_tier=True,
    )
    await add_idea(
        session_maker,
        title="Household Planner",
        description="Chores, groceries and a shared budget for roommates.",
        free_tier=True,
    )
    await add_idea(session_maker, title="Poetry Bot", description="Writes haiku on demand.", free_tier=True)

    response = await client.get("/ideas/search", params={"q": "budget"})
    assert response.status_code == 200
    payload = response.json()
    assert [row["title"] for row in payload["data"]] == ["Budget Dashboard", "Household Planner"]
    assert payload["data"][0]["rank"] > payload["data"][1]["rank"]


@pytest.mark.asyncio
async def test_search_with_no_terms_or_no_matches_returns_empty(ideahub_client):
    client, session_maker = ideahub_client
    await add_idea(session_maker, title="Component Libraries", description="Reusable UI pieces.", free_tier=True)

    for query in ("", "the of and", "quantum teleportation"):
        response = await client.get("/ideas/search", params={"q": query})
        assert response.status_code == 200
        assert response.json()["data"] == []

    plural = await client.get("/ideas/search", params={"q": "library"})
    assert [row["title"] for row in plural.json()["data"]] == ["Component Libraries"]


@pytest.mark.asyncio
async def test_search_honors_read_predicate_and_breaks_ties_by_views(ideahub_client):
    client, session_maker = ideahub_client
    await add_idea(session_maker, title="Travel Planner", description="Plan trips.", free_tier=True, view_count=1)
    await add_idea(session_maker, title="Travel Planner", description="Plan trips.", free_tier=False, view_count=40)

    guest = await client.get("/ideas/search", params={"q": "travel"})
    assert [row["view_count"] for row in guest.json()["data"]] == [1]

    member = await client.get("/ideas/search", params={"q": "travel"}, headers=MEMBER_HEADER)
    assert [row["view_count"] for row in member.json()["data"]] == [40, 1]


def test_trend_score_weights():
    assert trend_score(3, 2, 1) == 3 + 10 + 10
    assert trend_score(0, 0, 0) == 0


@pytest.mark.asyncio
async def test_trending_scores_recent_activity_and_drops_idle_ideas(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, MEMBER_ID)
    viewed = await add_idea(session_maker, title="Viewed Idea", free_tier=True)
    built = await add_idea(session_maker, title="Built Idea", free_tier=True)
    await add_idea(session_maker, title="Idle Idea", free_tier=True)
    stale = await add_idea(session_maker, title="Stale Idea", free_tier=True)
    hidden = await add_idea(session_maker, title="Hidden Idea", free_tier=False)

    now = datetime.now(timezone.utc)
    async with session_maker() as session:
        for _ in range(3):
            session.add(PageView(page="idea", idea_id=viewed.id, timestamp=now))
        session.add(PageView(page="idea", idea_id=hidden.id, timestamp=now))
        session.add(PageView(page="idea", idea_id=stale.id, timestamp=now - timedelta(days=30)))
        session.add(Comment(idea_id=built.id, user_id=MEMBER_ID, content="Nice", created_at=now))
        session.add(
            ProjectLink(
                idea_id=built.id,
                user_id=MEMBER_ID,
                title="Shipped",
                url="https://example.com/shipped",
                tools_used=["Claude"],
                created_at=now,
            )
        )
        await session.commit()

    response = await client.get("/ideas/trending")
    assert response.status_code == 200
    rows = response.json()["data"]
    assert [row["title"] for row in rows] == ["Built Idea", "Viewed Idea"]
    assert rows[0]["trend_score"] == 15
    assert rows[0]["recent_comments"] == 1
    assert rows[0]["recent_projects"] == 1
    assert rows[1]["trend_score"] == 3

    member = await client.get("/ideas/trending", params={"limit": 1}, headers=MEMBER_HEADER)
    assert [row["title"] for row in member.json()["data"]] == ["Built Idea"]

    wide = await client.get("/ideas/trending", params={"days": 60}, headers=MEMBER_HEADER)
    assert {row["title"] for row in wide.json()["data"]} == {
        "Built Idea",
        "Viewed Idea",
        "Hidden Idea",
        "Stale Idea",
    }
