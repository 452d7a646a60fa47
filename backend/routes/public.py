"""Public pages -- home, offers, rates, search, newsletter, tools, sitemap."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth import SessionContext, optional_user
from backend.config import SITE_BASE_URL
from backend.database import get_session
from backend.schemas import (
    CalculatorIn,
    CalculatorOut,
    CategoryOut,
    HomeOut,
    NewsletterIn,
    OfferOut,
    RateOut,
    RatingOut,
    SearchHit,
    SubscriptionOut,
    TopicOut,
)
from backend.services import forum, newsletter, offers, rates, search, seo, tools
from backend.services.taxonomy import list_categories

logger = logging.getLogger(__name__)

router = APIRouter(tags=["public"])


@router.get("/", response_model=HomeOut)
async def home(session: AsyncSession = Depends(get_session)):
    return HomeOut(
        featured_offers=[OfferOut.model_validate(o) for o in await offers.featured_offers(session)],
        rates=[RateOut(**r) for r in await rates.display_rates(session)],
        latest_topics=[TopicOut.model_validate(t) for t in await forum.latest_topics(session)],
    )


@router.get("/offers", response_model=list[OfferOut])
async def list_offers(
    category_id: Optional[str] = None,
    q: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    return await offers.list_offers(session, category_id=category_id, q=q)


@router.get("/offers/categories", response_model=list[CategoryOut])
async def offer_categories(session: AsyncSession = Depends(get_session)):
    return await list_categories(session, "offer")


@router.get("/rates", response_model=list[RateOut])
async def list_rates(session: AsyncSession = Depends(get_session)):
    return await rates.display_rates(session)


@router.get("/search", response_model=list[SearchHit])
async def live_search(q: str = "", session: AsyncSession = Depends(get_session)):
    return await search.live_search(session, q)


@router.post("/newsletter", response_model=SubscriptionOut, status_code=201)
async def subscribe(
    body: NewsletterIn,
    ctx: Optional[SessionContext] = Depends(optional_user),
    session: AsyncSession = Depends(get_session),
):
    return await newsletter.subscribe(session, body.email, user_id=ctx.user_id if ctx else "anonymous")


@router.post("/tools/credit-calculator", response_model=CalculatorOut)
async def credit_calculator(body: CalculatorIn):
    return tools.credit_calculator(body.amount, body.rate, body.term_months)


@router.get("/tools/credit-rating", response_model=RatingOut)
async def credit_rating(score: Optional[int] = Query(None, ge=tools.MIN_SCORE, le=tools.MAX_SCORE)):
    """Rating for the given score, or for a simulated one."""
    return tools.credit_rating(score if score is not None else tools.simulate_score())


@router.get("/sitemap.xml")
async def sitemap_xml(session: AsyncSession = Depends(get_session)):
    entries = await seo.build_sitemap(session, SITE_BASE_URL)
    return Response(content=seo.sitemap_xml(entries), media_type="application/xml")


@router.get("/sitemap.html", response_class=HTMLResponse)
async def sitemap_html(session: AsyncSession = Depends(get_session)):
    entries = await seo.build_sitemap(session, SITE_BASE_URL)
    return HTMLResponse(seo.sitemap_html(entries))
