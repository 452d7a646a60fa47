"""Partner offers: CRUD, listing with search, featured block."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import FEATURED_OFFERS_LIMIT
from backend.errors import NotFound, ValidationError
from backend.models import Category, Offer
from backend.services.taxonomy import require_category
from backend.store import Store
from backend.utils import matches_query

logger = logging.getLogger(__name__)

REQUIRED = ("title", "category_id", "external_url")


def _check_rating(rating) -> float:
    if rating is None or rating == "":
        return 0.0
    value = float(rating)
    if not 0 <= value <= 5:
        raise ValidationError("Рейтинг должен быть от 0 до 5")
    return value


async def create_offer(session: AsyncSession, user_id: str, **fields) -> Offer:
    if any(not fields.get(name) for name in REQUIRED):
        raise ValidationError()
    await require_category(session, fields["category_id"], "offer")
    fields["rating"] = _check_rating(fields.get("rating"))
    offer = await Store(session, Offer).create(user_id=user_id, **fields)
    logger.info(f"✅ Оффер создан: {offer.title}")
    return offer


async def update_offer(session: AsyncSession, offer_id: str, **fields) -> Offer:
    for name in REQUIRED:
        if name in fields and not fields[name]:
            raise ValidationError()
    if "category_id" in fields:
        await require_category(session, fields["category_id"], "offer")
    if "rating" in fields:
        fields["rating"] = _check_rating(fields["rating"])
    return await Store(session, Offer).update(offer_id, **fields)


async def delete_offer(session: AsyncSession, offer_id: str):
    await Store(session, Offer).delete(offer_id)


async def get_offer(session: AsyncSession, offer_id: str) -> Offer:
    offer = await Store(session, Offer).get(offer_id)
    if offer is None:
        raise NotFound("Оффер не найден")
    return offer


async def list_offers(
    session: AsyncSession,
    category_id: Optional[str] = None,
    q: Optional[str] = None,
    limit: int = 100,
) -> list[Offer]:
    """Newest first; the search filter applies to the loaded window."""
    where = None
    if category_id:
        category = await Store(session, Category).get(category_id)
        if category is None or category.type != "offer":
            return []
        where = {"category_id": category_id}
    rows = await Store(session, Offer).list(where=where, order_by=("created_at", "desc"), limit=limit)
    return [o for o in rows if matches_query(q, o.title, o.description)]


async def featured_offers(session: AsyncSession, limit: int = FEATURED_OFFERS_LIMIT) -> list[Offer]:
    """First ``limit`` featured offers in insertion order."""
    return await Store(session, Offer).list(
        where={"is_featured": True},
        order_by=[("created_at", "asc"), ("id", "asc")],
        limit=limit,
    )
