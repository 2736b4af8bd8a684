"""Full-text search over the idea catalog."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Sequence

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.idea import Idea
from services.access import Principal, idea_read_predicate
from services.ideas import serialize_idea


logger = logging.getLogger(__name__)

TITLE_WEIGHT = 1.0
DESCRIPTION_WEIGHT = 0.4

STOP_WORDS = frozenset(
    {
        "a", "about", "after", "all", "an", "and", "any", "are", "as", "at",
        "be", "been", "but", "by", "can", "do", "does", "for", "from", "has",
        "have", "how", "i", "if", "in", "into", "is", "it", "its", "me", "my",
        "no", "not", "of", "on", "or", "our", "so", "than", "that", "the",
        "their", "them", "then", "there", "these", "they", "this", "to", "up",
        "was", "we", "what", "when", "which", "who", "will", "with", "you",
        "your",
    }
)

_WORD_RE = re.compile(r"[a-z0-9]+")


def stem(word: str) -> str:
    """Light English plural stemming: 'libraries' -> 'library', 'boxes' -> 'box', 'apps' -> 'app'."""
    if len(word) > 4 and word.endswith("ies"):
        return word[:-3] + "y"
    if len(word) > 4 and word.endswith(("ses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if len(word) > 3 and word.endswith("s") and not word.endswith(("ss", "us", "is")):
        return word[:-1]
    return word


def tokenize(text: str) -> List[str]:
    return [stem(word) for word in _WORD_RE.findall(str(text or "").lower())]


def query_terms(query: str) -> List[str]:
    """Distinct stemmed terms of a query, stop words removed, in query order."""
    terms: List[str] = []
    for word in _WORD_RE.findall(str(query or "").lower()):
        if word in STOP_WORDS:
            continue
        token = stem(word)
        if token not in terms:
            terms.append(token)
    return terms


def _prefilter_stem(term: str) -> str:
    # 'library' must still match 'libraries' in the raw text.
    if len(term) > 3 and term.endswith("y"):
        return term[:-1]
    return term


def score_document(terms: Sequence[str], title: str, description: str) -> float:
    """Weighted relevance of one idea; 0.0 unless every term occurs somewhere."""
    if not terms:
        return 0.0
    title_tokens = tokenize(title)
    description_tokens = tokenize(description)
    document = set(title_tokens) | set(description_tokens)
    if any(term not in document for term in terms):
        return 0.0

    raw = 0.0
    for term in terms:
        raw += TITLE_WEIGHT * title_tokens.count(term)
        raw += DESCRIPTION_WEIGHT * description_tokens.count(term)
    length = len(title_tokens) + len(description_tokens)
    return raw / (1.0 + math.log(1.0 + length))


async def search_ideas(
    db: AsyncSession,
    principal: Principal,
    query: str,
) -> List[Dict[str, Any]]:
    """Rank readable ideas against ``query``; no terms or no matches gives []."""
    terms = query_terms(query)
    if not terms:
        return []

    # Substring prefilter in SQL; exact token matching and ranking below.
    term_filters = []
    for term in terms:
        pattern = f"%{_prefilter_stem(term)}%"
        term_filters.append(or_(Idea.title.ilike(pattern), Idea.description.ilike(pattern)))
    result = await db.execute(
        select(Idea).where(idea_read_predicate(principal), and_(*term_filters))
    )
    candidates = result.scalars().all()

    ranked = []
    for idea in candidates:
        rank = score_document(terms, idea.title, idea.description)
        if rank > 0:
            ranked.append((rank, idea))
    ranked.sort(key=lambda pair: (-pair[0], -(pair[1].view_count or 0)))

    logger.info("idea_search_run query=%s terms=%s matches=%s", query, len(terms), len(ranked))
    return [
        {**serialize_idea(idea), "rank": round(rank, 6)}
        for rank, idea in ranked
    ]
