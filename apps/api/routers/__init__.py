"""Routers package."""

from . import (
    health,
    auth,
    ideas,
    comments,
    projects,
    users,
    metrics,
    banners,
)
