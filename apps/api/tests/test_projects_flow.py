import pytest

from factories import SERVICE_AUTH_HEADER, add_idea, add_user, auth_header, fetch_idea
from services.projects import goal_percentage


BUILDER_ID = "project-builder"
RIVAL_ID = "project-rival"
BUILDER_HEADER = auth_header(BUILDER_ID)
RIVAL_HEADER = auth_header(RIVAL_ID)


def _body(idea_id, **overrides):
    body = {
        "idea_id": idea_id,
        "title": "Weekend build",
        "url": "https://builds.example.com/weekend",
        "description": "Built in two evenings.",
        "tools_used": ["Claude", "Lovable"],
    }
    body.update(overrides)
    return body


def test_goal_percentage_rounds_and_guards_zero_goal():
    assert goal_percentage(0, 4000) == 0.0
    assert goal_percentage(1, 3) == 33.33
    assert goal_percentage(50, 0) == 0.0
    assert goal_percentage(4000, 4000) == 100.0


@pytest.mark.asyncio
async def test_project_create_update_delete_cycle(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, BUILDER_ID, display_name="Builder")
    idea = await add_idea(session_maker, free_tier=True)

    created = await client.post("/projects", json=_body(idea.id), headers=BUILDER_HEADER)
    assert created.status_code == 201
    project = created.json()
    assert project["user"]["display_name"] == "Builder"
    assert (await fetch_idea(session_maker, idea.id)).project_count == 1

    listing = await client.get(f"/ideas/{idea.id}/projects")
    assert listing.json()["count"] == 1

    mine = await client.get(f"/users/{BUILDER_ID}/projects")
    assert [row["id"] for row in mine.json()["data"]] == [project["id"]]

    updated = await client.patch(
        f"/projects/{project['id']}", json={"title": "Renamed build"}, headers=BUILDER_HEADER
    )
    assert updated.status_code == 200
    assert updated.json()["title"] == "Renamed build"

    empty_update = await client.patch(f"/projects/{project['id']}", json={}, headers=BUILDER_HEADER)
    assert empty_update.status_code == 422

    deleted = await client.delete(f"/projects/{project['id']}", headers=BUILDER_HEADER)
    assert deleted.status_code == 200
    assert deleted.json() == {"id": project["id"], "deleted": True}
    assert (await fetch_idea(session_maker, idea.id)).project_count == 0

    again = await client.delete(f"/projects/{project['id']}", headers=BUILDER_HEADER)
    assert again.status_code == 404
    assert (await fetch_idea(session_maker, idea.id)).project_count == 0


@pytest.mark.asyncio
async def test_project_ownership_and_validation(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, BUILDER_ID)
    await add_user(session_maker, RIVAL_ID)
    idea = await add_idea(session_maker)

    spoofed = await client.post("/projects", json=_body(idea.id, user_id=BUILDER_ID), headers=RIVAL_HEADER)
    assert spoofed.status_code == 403

    bad_url = await client.post("/projects", json=_body(idea.id, url="ftp://example.com"), headers=BUILDER_HEADER)
    assert bad_url.status_code == 422

    missing_idea = await client.post("/projects", json=_body("no-such-idea"), headers=BUILDER_HEADER)
    assert missing_idea.status_code == 404

    project = (await client.post("/projects", json=_body(idea.id), headers=BUILDER_HEADER)).json()

    rival_edit = await client.patch(f"/projects/{project['id']}", json={"title": "Mine now"}, headers=RIVAL_HEADER)
    assert rival_edit.status_code == 403

    rival_delete = await client.delete(f"/projects/{project['id']}", headers=RIVAL_HEADER)
    assert rival_delete.status_code == 403

    service_delete = await client.delete(f"/projects/{project['id']}", headers=SERVICE_AUTH_HEADER)
    assert service_delete.status_code == 200
    assert (await fetch_idea(session_maker, idea.id)).project_count == 0


@pytest.mark.asyncio
async def test_project_stats_breakdown(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, BUILDER_ID)
    finance = await add_idea(session_maker, category="Finance")
    media = await add_idea(session_maker, category="Media")

    await client.post("/projects", json=_body(finance.id, tools_used=["Claude", "Bolt"]), headers=BUILDER_HEADER)
    await client.post("/projects", json=_body(finance.id, tools_used=["Claude"]), headers=BUILDER_HEADER)
    await client.post("/projects", json=_body(media.id, tools_used=["Cursor"]), headers=BUILDER_HEADER)

    response = await client.get("/projects/stats")
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_projects"] == 3
    assert stats["campaign_goal"] == 4000
    assert stats["progress_percentage"] == goal_percentage(3)
    assert stats["tools"]["breakdown"] == {"claude": 2, "bolt": 1, "lovable": 0, "other": 1}
    assert stats["tools"]["all_tools"] == {"Claude": 2, "Bolt": 1, "Cursor": 1}
    assert stats["categories"] == {"Finance": 2, "Media": 1}


@pytest.mark.asyncio
async def test_user_stats_summarize_activity(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, BUILDER_ID)
    idea = await add_idea(session_maker, free_tier=True)

    await client.post("/projects", json=_body(idea.id, tools_used=["Claude", "Bolt"]), headers=BUILDER_HEADER)
    await client.post("/projects", json=_body(idea.id, tools_used=["Claude", "Lovable"]), headers=BUILDER_HEADER)
    await client.post(f"/ideas/{idea.id}/comments", json={"content": "Done!"}, headers=BUILDER_HEADER)

    response = await client.get(f"/users/{BUILDER_ID}/stats")
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_comments"] == 1
    assert stats["total_projects"] == 2
    assert stats["favorite_tools"][0] == "Claude"
    assert len(stats["favorite_tools"]) == 3

    missing = await client.get("/users/nobody/stats")
    assert missing.status_code == 404
