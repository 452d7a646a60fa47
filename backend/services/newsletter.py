"""Newsletter subscriptions. Delivery itself is handled outside this service."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.errors import DuplicateSubscription, NotFound, ValidationError
from backend.models import NewsletterSubscription
from backend.store import Store

logger = logging.getLogger(__name__)


async def subscribe(session: AsyncSession, email: str, user_id: str = "anonymous") -> NewsletterSubscription:
    email = (email or "").strip()
    if not email or "@" not in email:
        raise ValidationError("Введите корректный email")

    store = Store(session, NewsletterSubscription)
    if await store.count({"email": email}):
        raise DuplicateSubscription()
    try:
        row = await store.create(email=email, is_active=True, user_id=user_id or "anonymous")
    except IntegrityError:
        # a parallel request inserted the same address first
        raise DuplicateSubscription()

    logger.info("📬 Новая подписка на рассылку")
    return row


async def unsubscribe(session: AsyncSession, email: str) -> NewsletterSubscription:
    store = Store(session, NewsletterSubscription)
    rows = await store.list(where={"email": (email or "").strip()}, limit=1)
    if not rows:
        raise NotFound("Подписка не найдена")
    return await store.update(rows[0].id, is_active=False)


async def list_subscriptions(session: AsyncSession, active_only: bool = False) -> list[NewsletterSubscription]:
    where = {"is_active": True} if active_only else None
    return await Store(session, NewsletterSubscription).list(where=where, order_by=("created_at", "desc"))
