from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from factories import SERVICE_AUTH_HEADER, add_idea, add_user, auth_header, fetch_idea
from services.comments import assemble_thread, build_comment_tree, descendant_ids


AUTHOR_ID = "thread-author"
OTHER_ID = "thread-other"
AUTHOR_HEADER = auth_header(AUTHOR_ID)
OTHER_HEADER = auth_header(OTHER_ID)

BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _comment(comment_id, parent=None, minute=0, flagged=False, user_id="u1"):
    return SimpleNamespace(
        id=comment_id,
        idea_id="idea-1",
        user_id=user_id,
        parent_comment_id=parent,
        content=f"comment {comment_id}",
        flagged_for_moderation=flagged,
        created_at=BASE_TIME + timedelta(minutes=minute),
        updated_at=None,
    )


def test_thread_is_breadth_first_then_chronological():
    comments = [
        _comment("root-late", minute=10),
        _comment("root-early", minute=0),
        _comment("reply-to-late", parent="root-late", minute=11),
        _comment("reply-to-early", parent="root-early", minute=20),
        _comment("grandchild", parent="reply-to-early", minute=21),
    ]

    rows = assemble_thread(comments, {"u1": "Ada"})

    assert [(row["id"], row["depth"]) for row in rows] == [
        ("root-early", 0),
        ("root-late", 0),
        ("reply-to-late", 1),
        ("reply-to-early", 1),
        ("grandchild", 2),
    ]
    assert rows[0]["user_display_name"] == "Ada"
    assert rows[0]["reply_count"] == 1
    assert rows[-1]["reply_count"] == 0


def test_flagged_comment_hides_its_subtree_and_reply_count():
    comments = [
        _comment("root", minute=0),
        _comment("visible-reply", parent="root", minute=1),
        _comment("flagged-reply", parent="root", minute=2, flagged=True),
        _comment("under-flagged", parent="flagged-reply", minute=3),
        _comment("flagged-root", minute=4, flagged=True),
    ]

    rows = assemble_thread(comments, {})

    assert [row["id"] for row in rows] == ["root", "visible-reply"]
    assert rows[0]["reply_count"] == 1


def test_empty_thread_assembles_to_nothing():
    assert assemble_thread([], {}) == []
    assert build_comment_tree([]) == []


def test_build_comment_tree_nests_rows_in_order():
    rows = assemble_thread(
        [
            _comment("a", minute=0),
            _comment("b", minute=1),
            _comment("a1", parent="a", minute=2),
            _comment("a2", parent="a", minute=3),
        ],
        {},
    )

    tree = build_comment_tree(rows)

    assert [node["id"] for node in tree] == ["a", "b"]
    assert [node["id"] for node in tree[0]["replies"]] == ["a1", "a2"]
    assert tree[1]["replies"] == []


def test_descendant_ids_collects_whole_subtree():
    pairs = [("a", None), ("b", "a"), ("c", "b"), ("d", "a"), ("e", None), ("f", "e")]
    assert sorted(descendant_ids("a", pairs)) == ["a", "b", "c", "d"]
    assert descendant_ids("f", pairs) == ["f"]


@pytest.mark.asyncio
async def test_comment_and_reply_update_idea_counter(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, AUTHOR_ID, display_name="Author")
    idea = await add_idea(session_maker, free_tier=True)

    created = await client.post(
        f"/ideas/{idea.id}/comments", json={"content": "Love this idea"}, headers=AUTHOR_HEADER
    )
    assert created.status_code == 201
    comment = created.json()
    assert comment["user"] == {"display_name": "Author"}
    assert "email" not in comment["user"]

    reply = await client.post(
        f"/comments/{comment['id']}/reply", json={"content": "Me too"}, headers=AUTHOR_HEADER
    )
    assert reply.status_code == 201
    assert reply.json()["parent_comment_id"] == comment["id"]

    assert (await fetch_idea(session_maker, idea.id)).comment_count == 2

    listing = await client.get(f"/ideas/{idea.id}/comments")
    assert listing.status_code == 200
    payload = listing.json()
    assert payload["count"] == 2
    assert payload["data"][0]["id"] == comment["id"]
    assert payload["data"][0]["reply_count"] == 1
    assert payload["data"][0]["replies"][0]["content"] == "Me too"

    thread = await client.get(f"/ideas/{idea.id}/comments/thread")
    assert [row["depth"] for row in thread.json()["data"]] == [0, 1]


@pytest.mark.asyncio
async def test_deleting_comment_removes_replies_and_decrements_by_count(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, AUTHOR_ID)
    await add_user(session_maker, OTHER_ID)
    idea = await add_idea(session_maker, free_tier=True)

    root = (
        await client.post(f"/ideas/{idea.id}/comments", json={"content": "Root"}, headers=AUTHOR_HEADER)
    ).json()
    child = (
        await client.post(f"/comments/{root['id']}/reply", json={"content": "Child"}, headers=OTHER_HEADER)
    ).json()
    await client.post(f"/comments/{child['id']}/reply", json={"content": "Grandchild"}, headers=AUTHOR_HEADER)
    await client.post(f"/ideas/{idea.id}/comments", json={"content": "Sibling"}, headers=OTHER_HEADER)
    assert (await fetch_idea(session_maker, idea.id)).comment_count == 4

    deleted = await client.delete(f"/comments/{root['id']}", headers=AUTHOR_HEADER)
    assert deleted.status_code == 200
    assert deleted.json() == {"id": root["id"], "deleted_count": 3}

    assert (await fetch_idea(session_maker, idea.id)).comment_count == 1
    remaining = (await client.get(f"/ideas/{idea.id}/comments/thread")).json()["data"]
    assert [row["content"] for row in remaining] == ["Sibling"]


@pytest.mark.asyncio
async def test_comment_ownership_rules(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, AUTHOR_ID)
    await add_user(session_maker, OTHER_ID)
    idea = await add_idea(session_maker)

    spoofed = await client.post(
        f"/ideas/{idea.id}/comments",
        json={"content": "Pretending", "user_id": AUTHOR_ID},
        headers=OTHER_HEADER,
    )
    assert spoofed.status_code == 403

    guest = await client.post(f"/ideas/{idea.id}/comments", json={"content": "Hi"})
    assert guest.status_code == 401

    comment = (
        await client.post(f"/ideas/{idea.id}/comments", json={"content": "Original"}, headers=AUTHOR_HEADER)
    ).json()

    foreign_edit = await client.patch(
        f"/comments/{comment['id']}", json={"content": "Hijacked"}, headers=OTHER_HEADER
    )
    assert foreign_edit.status_code == 403

    foreign_delete = await client.delete(f"/comments/{comment['id']}", headers=OTHER_HEADER)
    assert foreign_delete.status_code == 403

    service_edit = await client.patch(
        f"/comments/{comment['id']}", json={"content": "Moderated"}, headers=SERVICE_AUTH_HEADER
    )
    assert service_edit.status_code == 403

    own_edit = await client.patch(
        f"/comments/{comment['id']}", json={"content": "Edited"}, headers=AUTHOR_HEADER
    )
    assert own_edit.status_code == 200
    assert own_edit.json()["content"] == "Edited"

    moderated = await client.delete(f"/comments/{comment['id']}", headers=SERVICE_AUTH_HEADER)
    assert moderated.status_code == 200
    assert (await fetch_idea(session_maker, idea.id)).comment_count == 0


@pytest.mark.asyncio
async def test_flagged_comment_disappears_from_thread(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, AUTHOR_ID)
    await add_user(session_maker, OTHER_ID)
    idea = await add_idea(session_maker, free_tier=True)

    root = (
        await client.post(f"/ideas/{idea.id}/comments", json={"content": "Spam"}, headers=AUTHOR_HEADER)
    ).json()
    await client.post(f"/comments/{root['id']}/reply", json={"content": "Reply"}, headers=OTHER_HEADER)

    flagged = await client.post(f"/comments/{root['id']}/flag", headers=OTHER_HEADER)
    assert flagged.status_code == 200
    assert flagged.json()["flagged_for_moderation"] is True

    thread = await client.get(f"/ideas/{idea.id}/comments/thread")
    assert thread.json() == {"data": [], "count": 0}

    user_comments = await client.get(f"/users/{AUTHOR_ID}/comments")
    assert user_comments.json()["count"] == 0


@pytest.mark.asyncio
async def test_reply_parent_must_belong_to_same_idea(ideahub_client):
    client, session_maker = ideahub_client
    await add_user(session_maker, AUTHOR_ID)
    first = await add_idea(session_maker, title="First")
    second = await add_idea(session_maker, title="Second")

    parent = (
        await client.post(f"/ideas/{first.id}/comments", json={"content": "Parent"}, headers=AUTHOR_HEADER)
    ).json()

    mismatched = await client.post(
        f"/ideas/{second.id}/comments",
        json={"content": "Wrong thread", "parent_comment_id": parent["id"]},
        headers=AUTHOR_HEADER,
    )
    assert mismatched.status_code == 422

    blank = await client.post(f"/ideas/{first.id}/comments", json={"content": "   "}, headers=AUTHOR_HEADER)
    assert blank.status_code == 422
