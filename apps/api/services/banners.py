"""Campaign news banners."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.news_banner import NewsBanner
from services.access import Principal, news_banner_read_predicate, require_service
from services.ideas import iso_or_none


logger = logging.getLogger(__name__)


def serialize_banner(banner: NewsBanner) -> Dict[str, Any]:
    return {
        "id": banner.id,
        "title": banner.title,
        "description": banner.description,
        "link": banner.link,
        "active": bool(banner.active),
        "created_at": iso_or_none(banner.created_at),
        "expires_at": iso_or_none(banner.expires_at),
    }


async def list_banners_service(db: AsyncSession, principal: Principal) -> Dict[str, Any]:
    result = await db.execute(
        select(NewsBanner)
        .where(news_banner_read_predicate(principal))
        .order_by(NewsBanner.created_at.desc(), NewsBanner.id.asc())
    )
    banners = result.scalars().all()
    return {"data": [serialize_banner(banner) for banner in banners], "count": len(banners)}


async def create_banner_service(
    db: AsyncSession,
    principal: Principal,
    *,
    title: str,
    description: Optional[str] = None,
    link: Optional[str] = None,
    active: bool = True,
    expires_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    require_service(principal)
    banner = NewsBanner(
        title=title,
        description=description,
        link=link,
        active=active,
        expires_at=expires_at,
    )
    db.add(banner)
    await db.commit()
    await db.refresh(banner)
    logger.info("news_banner_created banner=%s active=%s", banner.id, banner.active)
    return serialize_banner(banner)
