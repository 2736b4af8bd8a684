from types import SimpleNamespace

import pytest

from services.access import (
    ANONYMOUS,
    ROLE_AUTHENTICATED,
    SERVICE,
    Principal,
    can_read_idea,
    check_insert_owner,
    require_authenticated,
    require_idea_write,
    require_metrics_read,
    require_owner,
    require_service,
)
from services.errors import PermissionDenied


MEMBER = Principal(role=ROLE_AUTHENTICATED, user_id="member-1")


def _idea(free_tier=False, guest_visible=False):
    return SimpleNamespace(free_tier=free_tier, guest_visible=guest_visible)


def test_guest_reads_only_free_tier_and_guest_visible_ideas():
    assert can_read_idea(ANONYMOUS, _idea(free_tier=True))
    assert can_read_idea(ANONYMOUS, _idea(guest_visible=True))
    assert not can_read_idea(ANONYMOUS, _idea())


def test_any_session_reads_every_idea():
    assert can_read_idea(MEMBER, _idea())
    assert can_read_idea(SERVICE, _idea())


def test_catalog_writes_require_service_role():
    require_idea_write(SERVICE)
    with pytest.raises(PermissionDenied):
        require_idea_write(MEMBER)
    with pytest.raises(PermissionDenied):
        require_idea_write(ANONYMOUS)


def test_insert_owner_must_match_session_identity():
    assert check_insert_owner(MEMBER, None) == "member-1"
    assert check_insert_owner(MEMBER, "member-1") == "member-1"
    with pytest.raises(PermissionDenied):
        check_insert_owner(MEMBER, "someone-else")
    with pytest.raises(PermissionDenied):
        check_insert_owner(ANONYMOUS, None)
    # The service role administers rows but never authors them.
    with pytest.raises(PermissionDenied):
        check_insert_owner(SERVICE, None)


def test_owner_guard_with_and_without_service_bypass():
    require_owner(MEMBER, "member-1")
    require_owner(SERVICE, "member-1")
    with pytest.raises(PermissionDenied):
        require_owner(MEMBER, "member-2")
    with pytest.raises(PermissionDenied):
        require_owner(SERVICE, "member-1", allow_service=False)
    with pytest.raises(PermissionDenied):
        require_owner(ANONYMOUS, None)


def test_metrics_and_service_guards():
    require_metrics_read(MEMBER)
    require_metrics_read(SERVICE)
    with pytest.raises(PermissionDenied):
        require_metrics_read(ANONYMOUS)

    require_service(SERVICE)
    with pytest.raises(PermissionDenied):
        require_service(MEMBER)


def test_require_authenticated_returns_user_id():
    assert require_authenticated(MEMBER) == "member-1"
    with pytest.raises(PermissionDenied):
        require_authenticated(Principal(role=ROLE_AUTHENTICATED, user_id=None))
