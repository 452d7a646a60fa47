"""Live search over offer and article titles."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from backend.models import Article, Offer
from backend.store import Store

MIN_QUERY_LENGTH = 2
PER_KIND_LIMIT = 5


async def live_search(session: AsyncSession, q: str) -> list[dict]:
    q = (q or "").strip()
    if len(q) < MIN_QUERY_LENGTH:
        return []

    offers = await Store(session, Offer).list(
        where={"title": {"contains": q}},
        limit=PER_KIND_LIMIT,
    )
    articles = await Store(session, Article).list(
        where={"title": {"contains": q}, "status": "published"},
        limit=PER_KIND_LIMIT,
    )
    results = [{"id": o.id, "title": o.title, "type": "offer", "slug": None} for o in offers]
    results += [{"id": a.id, "title": a.title, "type": "article", "slug": a.slug} for a in articles]
    return results
