"""Currency rates. Several rows may share a code; nothing is deduplicated."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from backend.errors import NotFound, ValidationError
from backend.models import CurrencyRate
from backend.store import Store

logger = logging.getLogger(__name__)

# shown while the table is empty
DEFAULT_RATES = [
    {"id": "default_usd", "code": "USD", "name": "Доллар США", "rate": 91.50},
    {"id": "default_eur", "code": "EUR", "name": "Евро", "rate": 99.20},
    {"id": "default_cny", "code": "CNY", "name": "Юань", "rate": 12.65},
]


def _clean(fields: dict, partial: bool = False) -> dict:
    if "code" in fields or not partial:
        code = (fields.get("code") or "").strip().upper()
        if not code:
            raise ValidationError()
        fields["code"] = code
    if "rate" in fields or not partial:
        if fields.get("rate") in (None, ""):
            raise ValidationError()
        rate = float(fields["rate"])
        if rate < 0:
            raise ValidationError("Курс не может быть отрицательным")
        fields["rate"] = rate
    return fields


async def create_rate(session: AsyncSession, user_id: str, **fields) -> CurrencyRate:
    return await Store(session, CurrencyRate).create(user_id=user_id, **_clean(fields))


async def update_rate(session: AsyncSession, rate_id: str, **fields) -> CurrencyRate:
    return await Store(session, CurrencyRate).update(rate_id, **_clean(fields, partial=True))


async def delete_rate(session: AsyncSession, rate_id: str):
    await Store(session, CurrencyRate).delete(rate_id)


async def get_rate(session: AsyncSession, rate_id: str) -> CurrencyRate:
    rate = await Store(session, CurrencyRate).get(rate_id)
    if rate is None:
        raise NotFound("Курс не найден")
    return rate


async def list_rates(session: AsyncSession) -> list[CurrencyRate]:
    return await Store(session, CurrencyRate).list(order_by=[("code", "asc"), ("created_at", "asc")])


async def display_rates(session: AsyncSession) -> list[dict]:
    """Rates for widgets: stored rows, or the defaults when none exist."""
    rows = await list_rates(session)
    if not rows:
        return [dict(r, updated_at=None) for r in DEFAULT_RATES]
    return [
        {"id": r.id, "code": r.code, "name": r.name, "rate": r.rate, "updated_at": r.updated_at}
        for r in rows
    ]
