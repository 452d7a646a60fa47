"""
Articles and news.

Both kinds share one code path keyed by ``kind`` ("article" | "news"):
slug handling, published listings with search, atomic view counting on the
detail page. News additionally gets excerpt/meta defaults, a featured block
and related items.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import FEATURED_NEWS_LIMIT
from backend.errors import NotFound, SlugConflict, ValidationError
from backend.models import ARTICLE_STATUSES, Article, Category, News
from backend.services.taxonomy import KIND_CATEGORY_TYPE, require_category
from backend.store import Store
from backend.utils import derive_slug, make_excerpt, matches_query

logger = logging.getLogger(__name__)

MODELS = {"article": Article, "news": News}

REQUIRED = ("title", "category_id", "content")

SLUG_ATTEMPTS = 5

# taken by the /articles/categories and /news/categories listings
RESERVED_SLUGS = ("categories",)


def _model(kind: str):
    try:
        return MODELS[kind]
    except KeyError:
        raise ValidationError(f"Неизвестный тип материала: {kind}")


async def slug_taken(session: AsyncSession, kind: str, slug: str, exclude_id: Optional[str] = None) -> bool:
    where = {"slug": slug}
    if exclude_id:
        where["id"] = {"ne": exclude_id}
    return await Store(session, _model(kind)).count(where) > 0


async def unique_slug(session: AsyncSession, kind: str, title: str) -> str:
    """Derived slug that is free right now; the unique index still has the last word."""
    slug = derive_slug(title)
    for _ in range(SLUG_ATTEMPTS):
        if not await slug_taken(session, kind, slug):
            return slug
        slug = derive_slug(title, now_ms=random.randrange(10000))
    raise SlugConflict(slug)


def _apply_news_defaults(fields: dict):
    content = fields.get("content") or ""
    if not fields.get("excerpt"):
        fields["excerpt"] = make_excerpt(content, 200)
    if not fields.get("meta_title"):
        fields["meta_title"] = fields.get("title")
    if not fields.get("meta_description"):
        fields["meta_description"] = fields.get("excerpt") or content[:160]


def _check_slug_allowed(slug: str):
    if slug in RESERVED_SLUGS:
        raise ValidationError(f"Адрес «{slug}» зарезервирован")


def _check_status(fields: dict):
    status = fields.get("status")
    if status is not None and status not in ARTICLE_STATUSES:
        raise ValidationError(f"Неизвестный статус: {status}")


async def create_content(
    session: AsyncSession,
    kind: str,
    user_id: str,
    derive: bool = False,
    **fields,
):
    """Create an article or a news item.

    With ``derive=True`` (or no slug given) the slug comes from the title and
    is retried on collision; a slug chosen by the caller must be free.
    """
    model = _model(kind)
    if any(not fields.get(name) for name in REQUIRED):
        raise ValidationError()
    _check_status(fields)
    await require_category(session, fields["category_id"], kind)

    slug = (fields.get("slug") or "").strip()
    if derive or not slug:
        slug = await unique_slug(session, kind, fields["title"])
    else:
        _check_slug_allowed(slug)
        if await slug_taken(session, kind, slug):
            raise SlugConflict(slug)
    fields["slug"] = slug

    if kind == "news":
        _apply_news_defaults(fields)

    try:
        row = await Store(session, model).create(user_id=user_id, **fields)
    except IntegrityError:
        raise SlugConflict(slug)

    logger.info(f"✅ {kind} создан: {row.slug}")
    return row


async def update_content(session: AsyncSession, kind: str, item_id: str, **fields):
    model = _model(kind)
    for name in REQUIRED + ("slug",):
        if name in fields and not fields[name]:
            raise ValidationError()
    _check_status(fields)
    if "category_id" in fields:
        await require_category(session, fields["category_id"], kind)
    if "slug" in fields:
        fields["slug"] = fields["slug"].strip()
        _check_slug_allowed(fields["slug"])
        if await slug_taken(session, kind, fields["slug"], exclude_id=item_id):
            raise SlugConflict(fields["slug"])

    try:
        return await Store(session, model).update(item_id, **fields)
    except IntegrityError:
        raise SlugConflict(fields.get("slug", ""))


async def delete_content(session: AsyncSession, kind: str, item_id: str):
    await Store(session, _model(kind)).delete(item_id)


async def get_content(session: AsyncSession, kind: str, item_id: str):
    row = await Store(session, _model(kind)).get(item_id)
    if row is None:
        raise NotFound()
    return row


async def list_content(session: AsyncSession, kind: str, status: Optional[str] = None, limit: int = 200):
    """Admin listing, every status, newest first."""
    where = {"status": status} if status else None
    return await Store(session, _model(kind)).list(where=where, order_by=("created_at", "desc"), limit=limit)


async def get_published_by_slug(session: AsyncSession, kind: str, slug: str):
    """Detail page lookup; counts the view atomically."""
    store = Store(session, _model(kind))
    rows = await store.list(where={"slug": slug, "status": "published"}, limit=1)
    if not rows:
        raise NotFound("Материал не найден")
    row = rows[0]
    await store.increment(row.id, "views")
    return row


async def list_published(
    session: AsyncSession,
    kind: str,
    category_id: Optional[str] = None,
    q: Optional[str] = None,
    limit: int = 50,
):
    """Published items, newest first, filtered by category and case-folded search."""
    where = {"status": "published"}
    if category_id:
        category = await Store(session, Category).get(category_id)
        if category is None or category.type != KIND_CATEGORY_TYPE[kind]:
            return []
        where["category_id"] = category_id

    rows = await Store(session, _model(kind)).list(where=where, order_by=("created_at", "desc"), limit=limit)
    if kind == "news":
        return [r for r in rows if matches_query(q, r.title, r.excerpt)]
    return [r for r in rows if matches_query(q, r.title, r.content)]


def split_featured(items: list, limit: int = FEATURED_NEWS_LIMIT) -> tuple[list, list]:
    featured = [n for n in items if n.is_featured][:limit]
    regular = [n for n in items if not n.is_featured]
    return featured, regular


async def related_news(session: AsyncSession, news: News, limit: int = 3) -> list[News]:
    rows = await Store(session, News).list(
        where={"status": "published", "category_id": news.category_id},
        order_by=("created_at", "desc"),
        limit=limit + 1,
    )
    return [n for n in rows if n.id != news.id][:limit]
