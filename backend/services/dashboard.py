"""Admin overview numbers and the demo content used to fill an empty hub."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth import SessionContext
from backend.errors import Conflict
from backend.models import (
    Article,
    Category,
    CurrencyRate,
    ForumPost,
    ForumTopic,
    News,
    NewsletterSubscription,
    Offer,
)
from backend.store import Store

logger = logging.getLogger(__name__)

DEMO_CATEGORIES = [
    {"id": "cat_1", "name": "Кредитные карты", "slug": "credit-cards", "type": "offer",
     "description": "Лучшие кредитные карты с кэшбэком"},
    {"id": "cat_2", "name": "Потребительские кредиты", "slug": "loans", "type": "offer",
     "description": "Кредиты на любые цели"},
    {"id": "cat_3", "name": "Личные финансы", "slug": "personal-finance", "type": "article",
     "description": "Советы по экономии и накоплению"},
    {"id": "cat_4", "name": "Инвестиции", "slug": "investments", "type": "article",
     "description": "Куда вложить деньги в 2026 году"},
    {"id": "cat_5", "name": "Общий раздел", "slug": "general", "type": "forum",
     "description": "Обсуждение любых финансовых тем"},
]

DEMO_OFFERS = [
    {
        "id": "off_1",
        "title": "Тинькофф Платинум",
        "category_id": "cat_1",
        "description": "Кредитный лимит до 1 000 000 ₽. Беспроцентный период до 55 дней. "
                       "Кэшбэк до 30% у партнеров.",
        "external_url": "https://www.tinkoff.ru/cards/credit-cards/platinum/",
        "rating": 4.9,
        "is_featured": 1,
    },
    {
        "id": "off_2",
        "title": "Альфа-Карта 365 дней",
        "category_id": "cat_1",
        "description": "Год без процентов на покупки в первые 30 дней. Бесплатное обслуживание навсегда.",
        "external_url": "https://alfabank.ru/get-card/credit/lp/365days/",
        "rating": 4.8,
        "is_featured": 1,
    },
]

DEMO_ARTICLES = [
    {
        "id": "art_1",
        "title": "Как накопить на первый взнос по ипотеке за 2 года",
        "slug": "how-to-save-for-mortgage",
        "category_id": "cat_3",
        "content": (
            "Накопление на первоначальный взнос — один из самых сложных этапов покупки жилья. "
            "В этой статье мы разберем стратегию 50/30/20 и покажем, как автоматизация накоплений "
            "поможет вам достичь цели быстрее. \n\n"
            "Шаг 1: Анализ расходов. Используйте банковские приложения для категоризации трат.\n"
            "Шаг 2: Открытие вклада с высокой ставкой. \n"
            "Шаг 3: Минимизация импульсивных покупок."
        ),
        "status": "published",
        "is_featured": 1,
    },
    {
        "id": "art_2",
        "title": "Топ-5 инвестиционных инструментов 2026 года",
        "slug": "top-5-investments-2026",
        "category_id": "cat_4",
        "content": (
            "Мир финансов меняется стремительно. В 2026 году на первый план выходят цифровые активы, "
            "облигации с плавающим купоном и фонды недвижимости. \n\n"
            "1. ОФЗ-ПК: защита от инфляции.\n"
            "2. Золотые слитки и монеты.\n"
            "3. Акции технологического сектора.\n"
            "4. Дивидендные аристократы.\n"
            "5. Краудлендинговые платформы."
        ),
        "status": "published",
        "is_featured": 1,
    },
]

DEMO_RATES = [
    {"id": "rate_1", "code": "USD", "name": "Доллар США", "rate": 91.45},
    {"id": "rate_2", "code": "EUR", "name": "Евро", "rate": 99.12},
    {"id": "rate_3", "code": "CNY", "name": "Юань", "rate": 12.62},
]


async def stats(session: AsyncSession) -> dict:
    return {
        "offers": await Store(session, Offer).count(),
        "articles": await Store(session, Article).count(),
        "news": await Store(session, News).count(),
        "topics": await Store(session, ForumTopic).count(),
        "categories": await Store(session, Category).count(),
        "pending_topics": await Store(session, ForumTopic).count({"is_approved": False}),
        "pending_posts": await Store(session, ForumPost).count({"is_approved": False}),
        "subscribers": await Store(session, NewsletterSubscription).count({"is_active": True}),
    }


async def seed_demo_data(session: AsyncSession, ctx: SessionContext) -> dict:
    """Upsert the demo rows by fixed id; running it twice changes nothing."""
    plan = (
        (Category, DEMO_CATEGORIES, "system"),
        (Offer, DEMO_OFFERS, ctx.user_id),
        (Article, DEMO_ARTICLES, ctx.user_id),
        (CurrencyRate, DEMO_RATES, ctx.user_id),
    )
    summary = {}
    for model, rows, owner in plan:
        store = Store(session, model)
        for row in rows:
            try:
                await store.upsert(user_id=owner, **row)
            except IntegrityError:
                raise Conflict(f"Не удалось добавить демо-данные: {model.__tablename__}/{row['id']}")
        summary[model.__tablename__] = len(rows)

    logger.info(f"✅ Демо-данные добавлены: {summary}")
    return summary
