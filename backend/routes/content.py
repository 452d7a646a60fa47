"""Public articles and news -- listings and slug-routed detail pages."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.database import get_session
from backend.schemas import ArticleDetail, ArticleOut, CategoryOut, NewsDetail, NewsOut, NewsPage
from backend.services import content
from backend.services.taxonomy import label_for, list_categories
from backend.utils import render_content

router = APIRouter(tags=["content"])


@router.get("/articles", response_model=list[ArticleOut])
async def list_articles(
    category_id: Optional[str] = None,
    q: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    return await content.list_published(session, "article", category_id=category_id, q=q)


@router.get("/articles/categories", response_model=list[CategoryOut])
async def article_categories(session: AsyncSession = Depends(get_session)):
    return await list_categories(session, "article")


@router.get("/articles/{slug}", response_model=ArticleDetail)
async def article_detail(slug: str, session: AsyncSession = Depends(get_session)):
    article = await content.get_published_by_slug(session, "article", slug)
    return ArticleDetail(
        article=ArticleOut.model_validate(article),
        category_name=await label_for(session, article.category_id),
        blocks=render_content(article.content),
    )


@router.get("/news", response_model=NewsPage)
async def list_news(
    category_id: Optional[str] = None,
    q: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    items = await content.list_published(session, "news", category_id=category_id, q=q)
    featured, regular = content.split_featured(items)
    return NewsPage(
        featured=[NewsOut.model_validate(n) for n in featured],
        regular=[NewsOut.model_validate(n) for n in regular],
    )


@router.get("/news/categories", response_model=list[CategoryOut])
async def news_categories(session: AsyncSession = Depends(get_session)):
    return await list_categories(session, "news")


@router.get("/news/{slug}", response_model=NewsDetail)
async def news_detail(slug: str, session: AsyncSession = Depends(get_session)):
    item = await content.get_published_by_slug(session, "news", slug)
    return NewsDetail(
        news=NewsOut.model_validate(item),
        category_name=await label_for(session, item.category_id),
        blocks=render_content(item.content),
        related=[NewsOut.model_validate(n) for n in await content.related_news(session, item)],
    )
