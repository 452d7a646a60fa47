"""Admin endpoints -- statistics, demo data, catalogue management, sitemap."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth import SessionContext, require_admin
from backend.config import SITE_BASE_URL
from backend.database import get_session
from backend.schemas import (
    ArticleIn,
    ArticleOut,
    CategoryIn,
    CategoryOut,
    CategoryUpdate,
    ContentUpdate,
    NewsIn,
    NewsOut,
    OfferIn,
    OfferOut,
    OfferUpdate,
    RateIn,
    RateOut,
    RateUpdate,
    SubscriptionOut,
    SystemStats,
)
from backend.services import content, dashboard, newsletter, offers, rates, seo, taxonomy

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def schedule_indexnow(background: BackgroundTasks, article):
    background.add_task(seo.ping_indexnow, f"{SITE_BASE_URL}/articles/{article.slug}")


# -----------------
# Dashboard
# -----------------

@router.get("", response_model=SystemStats)
async def system_stats(session: AsyncSession = Depends(get_session)):
    return SystemStats(**await dashboard.stats(session))


@router.post("/seed")
async def seed_demo_data(
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Fill the hub with demo categories, offers, articles and rates."""
    return {"seeded": await dashboard.seed_demo_data(session, ctx)}


# -----------------
# Categories
# -----------------

@router.get("/categories", response_model=list[CategoryOut])
async def list_categories(type: Optional[str] = None, session: AsyncSession = Depends(get_session)):
    return await taxonomy.list_categories(session, type)


@router.post("/categories", response_model=CategoryOut, status_code=201)
async def create_category(
    body: CategoryIn,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return await taxonomy.create_category(session, user_id=ctx.user_id, **body.model_dump())


@router.patch("/categories/{category_id}", response_model=CategoryOut)
async def update_category(category_id: str, body: CategoryUpdate, session: AsyncSession = Depends(get_session)):
    return await taxonomy.update_category(session, category_id, **body.model_dump(exclude_unset=True))


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str,
    reassign_to: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    await taxonomy.delete_category(session, category_id, reassign_to=reassign_to)
    return {"ok": True}


# -----------------
# Offers
# -----------------

@router.get("/offers", response_model=list[OfferOut])
async def list_offers(session: AsyncSession = Depends(get_session)):
    return await offers.list_offers(session, limit=500)


@router.post("/offers", response_model=OfferOut, status_code=201)
async def create_offer(
    body: OfferIn,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return await offers.create_offer(session, ctx.user_id, **body.model_dump())


@router.patch("/offers/{offer_id}", response_model=OfferOut)
async def update_offer(offer_id: str, body: OfferUpdate, session: AsyncSession = Depends(get_session)):
    return await offers.update_offer(session, offer_id, **body.model_dump(exclude_unset=True))


@router.delete("/offers/{offer_id}")
async def delete_offer(offer_id: str, session: AsyncSession = Depends(get_session)):
    await offers.delete_offer(session, offer_id)
    return {"ok": True}


# -----------------
# Articles & News
# -----------------

@router.get("/articles", response_model=list[ArticleOut])
async def list_articles(status: Optional[str] = None, session: AsyncSession = Depends(get_session)):
    return await content.list_content(session, "article", status=status)


@router.post("/articles", response_model=ArticleOut, status_code=201)
async def create_article(
    body: ArticleIn,
    background: BackgroundTasks,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    fields = body.model_dump(exclude={"derive_slug"})
    article = await content.create_content(session, "article", ctx.user_id, derive=body.derive_slug, **fields)
    schedule_indexnow(background, article)
    return article


@router.patch("/articles/{article_id}", response_model=ArticleOut)
async def update_article(article_id: str, body: ContentUpdate, session: AsyncSession = Depends(get_session)):
    return await content.update_content(session, "article", article_id, **body.model_dump(exclude_unset=True))


@router.delete("/articles/{article_id}")
async def delete_article(article_id: str, session: AsyncSession = Depends(get_session)):
    await content.delete_content(session, "article", article_id)
    return {"ok": True}


@router.get("/news", response_model=list[NewsOut])
async def list_news(status: Optional[str] = None, session: AsyncSession = Depends(get_session)):
    return await content.list_content(session, "news", status=status)


@router.post("/news", response_model=NewsOut, status_code=201)
async def create_news(
    body: NewsIn,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    fields = body.model_dump(exclude={"derive_slug"})
    return await content.create_content(session, "news", ctx.user_id, derive=body.derive_slug, **fields)


@router.patch("/news/{news_id}", response_model=NewsOut)
async def update_news(news_id: str, body: ContentUpdate, session: AsyncSession = Depends(get_session)):
    return await content.update_content(session, "news", news_id, **body.model_dump(exclude_unset=True))


@router.delete("/news/{news_id}")
async def delete_news(news_id: str, session: AsyncSession = Depends(get_session)):
    await content.delete_content(session, "news", news_id)
    return {"ok": True}


# -----------------
# Rates & Newsletter
# -----------------

@router.get("/rates", response_model=list[RateOut])
async def list_rates(session: AsyncSession = Depends(get_session)):
    return await rates.list_rates(session)


@router.post("/rates", response_model=RateOut, status_code=201)
async def create_rate(
    body: RateIn,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return await rates.create_rate(session, ctx.user_id, **body.model_dump())


@router.patch("/rates/{rate_id}", response_model=RateOut)
async def update_rate(rate_id: str, body: RateUpdate, session: AsyncSession = Depends(get_session)):
    return await rates.update_rate(session, rate_id, **body.model_dump(exclude_unset=True))


@router.delete("/rates/{rate_id}")
async def delete_rate(rate_id: str, session: AsyncSession = Depends(get_session)):
    await rates.delete_rate(session, rate_id)
    return {"ok": True}


@router.get("/newsletter", response_model=list[SubscriptionOut])
async def list_subscriptions(active_only: bool = False, session: AsyncSession = Depends(get_session)):
    return await newsletter.list_subscriptions(session, active_only=active_only)


# -----------------
# Sitemap
# -----------------

@router.get("/sitemap")
async def sitemap(session: AsyncSession = Depends(get_session)):
    entries = await seo.build_sitemap(session, SITE_BASE_URL)
    return {
        "total": len(entries),
        "articles": sum("/articles/" in e.url for e in entries),
        "news": sum("/news/" in e.url for e in entries),
        "forum": sum("/forum/" in e.url for e in entries),
        "entries": [
            {"url": e.url, "title": e.title, "lastmod": e.lastmod, "changefreq": e.changefreq, "priority": e.priority}
            for e in entries
        ],
        "xml": seo.sitemap_xml(entries),
        "html": seo.sitemap_html(entries),
    }
