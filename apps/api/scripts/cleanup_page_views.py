#!/usr/bin/env python3
"""Delete page views older than the retention window."""

from __future__ import annotations

import asyncio
import os
import sys
from argparse import ArgumentParser

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings
from database import async_session_maker, engine
from services.analytics import cleanup_old_page_views


async def run(days_to_keep: int) -> int:
    try:
        async with async_session_maker() as session:
            return await cleanup_old_page_views(session, days_to_keep)
    finally:
        await engine.dispose()


def main() -> None:
    parser = ArgumentParser(description="Delete aged page_views rows")
    parser.add_argument("--days", type=int, default=settings.PAGE_VIEW_RETENTION_DAYS)
    args = parser.parse_args()

    deleted = asyncio.run(run(args.days))
    print(f"[cleanup] deleted {deleted} page view(s) older than {args.days} day(s)")


if __name__ == "__main__":
    main()
