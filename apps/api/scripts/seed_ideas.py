#!/usr/bin/env python3
"""Load a starter idea catalog through the service-role write path."""

from __future__ import annotations

import asyncio
import os
import sys
from argparse import ArgumentParser
from typing import Any, Dict, List

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.future import select

from database import Base, async_session_maker, engine
from models.idea import Idea
from services.access import SERVICE
from services.ideas import create_idea_service


SEED_IDEAS: List[Dict[str, Any]] = [
    {
        "title": "AI Recipe Generator",
        "description": "Turn the ingredients in your fridge into step-by-step recipes with nutrition estimates.",
        "category": "Food & Cooking",
        "difficulty": "Beginner",
        "tools": ["Claude", "Lovable"],
        "tags": ["recipes", "nutrition"],
        "estimated_build_time": "1-2 days",
        "free_tier": True,
    },
    {
        "title": "Personal Finance Coach",
        "description": "Categorize bank exports and explain monthly spending patterns in plain language.",
        "category": "Finance",
        "difficulty": "Intermediate",
        "tools": ["Claude", "Bolt"],
        "tags": ["budgeting", "csv"],
        "estimated_build_time": "3-5 days",
        "free_tier": True,
    },
    {
        "title": "BuyButton Storefront",
        "description": "A one-page storefront that turns a product description into a checkout-ready landing page.",
        "category": "E-commerce",
        "difficulty": "Beginner",
        "tools": ["Bolt"],
        "tags": ["payments", "landing page"],
        "estimated_build_time": "1 day",
        "free_tier": False,
        "guest_visible": True,
    },
    {
        "title": "Meeting Notes Summarizer",
        "description": "Summarize meeting transcripts into decisions, owners and follow-up tasks.",
        "category": "Productivity",
        "difficulty": "Intermediate",
        "tools": ["Claude", "Google AI Studio"],
        "tags": ["meetings", "summaries"],
        "estimated_build_time": "2-3 days",
        "free_tier": False,
    },
    {
        "title": "Codebase Tour Guide",
        "description": "Answer onboarding questions about a repository by indexing its files and docs.",
        "category": "Developer Tools",
        "difficulty": "Advanced",
        "tools": ["Claude"],
        "tags": ["onboarding", "search"],
        "estimated_build_time": "1-2 weeks",
        "free_tier": False,
    },
]


async def seed(create_schema: bool) -> int:
    created = 0
    try:
        if create_schema:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        async with async_session_maker() as session:
            for payload in SEED_IDEAS:
                existing = await session.execute(select(Idea.id).where(Idea.title == payload["title"]))
                if existing.scalar_one_or_none():
                    continue
                await create_idea_service(session, SERVICE, payload)
                created += 1
    finally:
        await engine.dispose()
    return created


def main() -> None:
    parser = ArgumentParser(description="Seed the idea catalog")
    parser.add_argument("--create-schema", action="store_true", help="create tables before seeding")
    args = parser.parse_args()

    created = asyncio.run(seed(args.create_schema))
    print(f"[seed] created {created} idea(s)")


if __name__ == "__main__":
    main()
