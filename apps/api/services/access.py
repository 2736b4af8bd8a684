"""Row-level access policies.

Every visibility and ownership rule lives here. Read rules are returned as
SQLAlchemy filter expressions so they are evaluated by the database on every
row a query touches; write rules are guard functions raising the error
taxonomy from ``services.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from models.idea import Idea
from models.news_banner import NewsBanner
from models.page_view import PageView
from services.errors import PermissionDenied


ROLE_ANON = "anon"
ROLE_AUTHENTICATED = "authenticated"
ROLE_SERVICE = "service_role"
ROLES = (ROLE_ANON, ROLE_AUTHENTICATED, ROLE_SERVICE)


@dataclass(frozen=True)
class Principal:
    """The role and identity a request executes as."""

    role: str = ROLE_ANON
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.role in (ROLE_AUTHENTICATED, ROLE_SERVICE)

    @property
    def is_service(self) -> bool:
        return self.role == ROLE_SERVICE


ANONYMOUS = Principal()
SERVICE = Principal(role=ROLE_SERVICE)


# ---------------------------------------------------------------------------
# Ideas
# ---------------------------------------------------------------------------

def idea_read_predicate(principal: Principal) -> ColumnElement:
    """Guests see free-tier rows and per-row overrides; any session sees everything."""
    if principal.is_authenticated:
        return true()
    return or_(Idea.free_tier.is_(True), Idea.guest_visible.is_(True))


def can_read_idea(principal: Principal, idea: Idea) -> bool:
    if principal.is_authenticated:
        return True
    return bool(idea.free_tier) or bool(idea.guest_visible)


def require_idea_write(principal: Principal) -> None:
    if not principal.is_service:
        raise PermissionDenied("Only administrators can modify the idea catalog")


# ---------------------------------------------------------------------------
# Ownership (comments, project links, profiles)
# ---------------------------------------------------------------------------

def require_authenticated(principal: Principal) -> str:
    if principal.role != ROLE_AUTHENTICATED or not principal.user_id:
        raise PermissionDenied("Authentication required")
    return principal.user_id


def check_insert_owner(principal: Principal, owner_id: Optional[str]) -> str:
    """Inserted rows must be authored by the session identity."""
    user_id = require_authenticated(principal)
    if owner_id is not None and owner_id != user_id:
        raise PermissionDenied("Cannot create content on behalf of another user")
    return user_id


def require_owner(principal: Principal, owner_id: Optional[str], *, allow_service: bool = True) -> None:
    if allow_service and principal.is_service:
        return
    if principal.role != ROLE_AUTHENTICATED or principal.user_id != owner_id:
        raise PermissionDenied("You can only modify your own content")


def require_service(principal: Principal) -> None:
    if not principal.is_service:
        raise PermissionDenied("Administrative role required")


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

def page_view_read_predicate(principal: Principal) -> ColumnElement:
    if principal.is_service:
        return true()
    if principal.role == ROLE_AUTHENTICATED and principal.user_id:
        return PageView.user_id == principal.user_id
    return false()


def require_metrics_read(principal: Principal) -> None:
    if not principal.is_authenticated:
        raise PermissionDenied("Authentication required")


def news_banner_read_predicate(principal: Principal, now: Optional[datetime] = None) -> ColumnElement:
    if principal.is_service:
        return true()
    current = now or datetime.now(timezone.utc)
    return and_(
        NewsBanner.active.is_(True),
        or_(NewsBanner.expires_at.is_(None), NewsBanner.expires_at > current),
    )
