"""
Categories and the partition rule.

Every offer, article, news item and forum topic points at a category whose
``type`` matches the entity kind. ``require_category`` is the single write
path check; listings filter by the matching type as well.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.errors import CategoryInUse, CategoryTypeMismatch, NotFound, SlugConflict, ValidationError
from backend.models import CATEGORY_TYPES, Article, Category, ForumTopic, News, Offer
from backend.store import Store

logger = logging.getLogger(__name__)

KIND_CATEGORY_TYPE = {
    "offer": "offer",
    "article": "article",
    "news": "news",
    "forum_topic": "forum",
}

# category type -> model whose rows reference it
DEPENDENT_MODELS = {
    "offer": Offer,
    "article": Article,
    "news": News,
    "forum": ForumTopic,
}

UNCATEGORIZED = "Без категории"


def category_label(category: Optional[Category]) -> str:
    return category.name if category is not None else UNCATEGORIZED


async def label_for(session: AsyncSession, category_id: Optional[str]) -> str:
    return category_label(await Store(session, Category).get(category_id))


async def list_categories(session: AsyncSession, type: Optional[str] = None) -> list[Category]:
    where = {"type": type} if type else None
    return await Store(session, Category).list(where=where, order_by=[("type", "asc"), ("name", "asc")])


async def get_category(session: AsyncSession, category_id: str) -> Category:
    category = await Store(session, Category).get(category_id)
    if category is None:
        raise NotFound("Категория не найдена")
    return category


async def require_category(session: AsyncSession, category_id: str, kind: str) -> Category:
    """Return the category for ``kind`` or raise if it is missing or of another type."""
    if not category_id:
        raise ValidationError("Выберите категорию")
    expected = KIND_CATEGORY_TYPE[kind]
    category = await get_category(session, category_id)
    if category.type != expected:
        raise CategoryTypeMismatch(expected, category.type)
    return category


async def _check_slug_free(session: AsyncSession, type: str, slug: str, exclude_id: Optional[str] = None):
    where = {"type": type, "slug": slug}
    if exclude_id:
        where["id"] = {"ne": exclude_id}
    if await Store(session, Category).count(where):
        raise SlugConflict(slug)


def _validate(name: str, slug: str, type: str):
    if not (name or "").strip() or not (slug or "").strip():
        raise ValidationError()
    if type not in CATEGORY_TYPES:
        raise ValidationError(f"Неизвестный тип категории: {type}")


async def create_category(
    session: AsyncSession,
    name: str,
    slug: str,
    type: str,
    description: str = "",
    user_id: str = "system",
) -> Category:
    _validate(name, slug, type)
    slug = slug.strip()
    await _check_slug_free(session, type, slug)
    category = await Store(session, Category).create(
        name=name.strip(), slug=slug, type=type, description=description, user_id=user_id,
    )
    logger.info(f"✅ Категория создана: {type}/{slug}")
    return category


async def update_category(session: AsyncSession, category_id: str, **fields) -> Category:
    category = await get_category(session, category_id)
    name = fields.get("name", category.name)
    slug = (fields.get("slug") or category.slug).strip()
    type = fields.get("type", category.type)
    _validate(name, slug, type)

    if type != category.type and await count_dependents(session, category):
        # moving a used category to another partition would break the rule for its rows
        raise CategoryInUse(await count_dependents(session, category))
    if slug != category.slug or type != category.type:
        await _check_slug_free(session, type, slug, exclude_id=category_id)

    fields.update(name=name, slug=slug, type=type)
    return await Store(session, Category).update(category_id, **fields)


async def count_dependents(session: AsyncSession, category: Category) -> int:
    model = DEPENDENT_MODELS[category.type]
    return await Store(session, model).count({"category_id": category.id})


async def delete_category(session: AsyncSession, category_id: str, reassign_to: Optional[str] = None):
    """Delete a category; rows that use it must first move to ``reassign_to``."""
    category = await get_category(session, category_id)
    dependents = await count_dependents(session, category)

    if dependents:
        if not reassign_to or reassign_to == category_id:
            raise CategoryInUse(dependents)
        target = await get_category(session, reassign_to)
        if target.type != category.type:
            raise CategoryTypeMismatch(category.type, target.type)
        model = DEPENDENT_MODELS[category.type]
        await session.execute(
            update(model).where(model.category_id == category_id).values(category_id=target.id)
        )
        logger.info(f"🔄 Перенесено записей: {dependents} ({category.slug} -> {target.slug})")

    await Store(session, Category).delete(category_id)
    logger.info(f"🗑 Категория удалена: {category.type}/{category.slug}")


async def category_map(session: AsyncSession, type: Optional[str] = None) -> dict[str, Category]:
    return {c.id: c for c in await list_categories(session, type)}
