"""Admin AI content and news parser endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.assist import content_assist
from backend.assist.llm_client import LLMClient
from backend.assist.scraper import Scraper
from backend.auth import SessionContext, require_admin
from backend.database import get_session
from backend.routes.admin import schedule_indexnow
from backend.schemas import (
    ArticleOut,
    GenerateIn,
    GeneratedArticle,
    Headline,
    NewsDraft,
    ParsedPage,
    PublishDraftIn,
    RewriteIn,
    RewriteOut,
    SaveArticleIn,
    UrlIn,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin-assist"], dependencies=[Depends(require_admin)])

_llm: LLMClient | None = None
_scraper: Scraper | None = None


def get_llm() -> LLMClient:
    global _llm
    if _llm is None:
        _llm = LLMClient()
    return _llm


def get_scraper() -> Scraper:
    global _scraper
    if _scraper is None:
        _scraper = Scraper()
    return _scraper


async def close_clients():
    if _llm is not None:
        await _llm.close()
    if _scraper is not None:
        await _scraper.close()


# -----------------
# AI content
# -----------------

@router.post("/ai/generate", response_model=GeneratedArticle)
async def generate_article(body: GenerateIn, llm: LLMClient = Depends(get_llm)):
    return await content_assist.generate_article(llm, body.topic)


@router.post("/ai/rewrite", response_model=RewriteOut)
async def rewrite_text(body: RewriteIn, llm: LLMClient = Depends(get_llm)):
    return RewriteOut(text=await content_assist.rewrite_text(llm, body.text))


@router.post("/ai/save-article", response_model=ArticleOut, status_code=201)
async def save_article(
    body: SaveArticleIn,
    background: BackgroundTasks,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    article = await content_assist.publish_draft(
        session, ctx, {"title": body.title, "content": body.content}, body.category_id,
    )
    schedule_indexnow(background, article)
    return article


# -----------------
# News parser
# -----------------

@router.get("/news/parser/headlines", response_model=list[Headline])
async def headlines(scraper: Scraper = Depends(get_scraper)):
    return await content_assist.fetch_headlines(scraper)


@router.post("/news/parser/parse-url", response_model=ParsedPage)
async def parse_url(body: UrlIn, scraper: Scraper = Depends(get_scraper)):
    return await content_assist.parse_url(scraper, body.url)


@router.post("/news/parser/rewrite", response_model=NewsDraft)
async def rewrite_news(
    body: UrlIn,
    llm: LLMClient = Depends(get_llm),
    scraper: Scraper = Depends(get_scraper),
):
    return await content_assist.rewrite_news(llm, scraper, body.url)


@router.post("/news/parser/publish", status_code=201)
async def publish_news(
    body: PublishDraftIn,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    row = await content_assist.publish_draft(
        session, ctx, body.model_dump(include={"title", "url", "content"}), body.category_id, kind=body.kind,
    )
    return {"id": row.id, "slug": row.slug, "kind": body.kind}
