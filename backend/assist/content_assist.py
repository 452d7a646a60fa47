"""
Editorial assist flows: article generation, rewriting, news import.

The LLM and the scraper are passed in, so routes can share one instance of
each and tests can substitute fakes.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.assist.llm_client import LLMClient
from backend.assist.scraper import Scraper
from backend.auth import SessionContext
from backend.config import BANKI_NEWS_URL
from backend.errors import ValidationError
from backend.services.content import create_content
from backend.utils import make_excerpt

logger = logging.getLogger(__name__)

BANKI_BASE_URL = "https://www.banki.ru"
HEADLINE_MARKERS = ("/news/daytheme/", "/news/lenta/")

COPYWRITER_PROMPT = """Ты - профессиональный финансовый копирайтер с 10-летним опытом.
Твоя задача - писать SEO-оптимизированные статьи для финансового портала на русском языке.
Статьи должны быть:
- Информативными и полезными для читателя
- Структурированными с подзаголовками (##)
- Содержать практические советы
- Длиной 800-1500 слов
- Уникальными и интересными

Формат ответа:
ЗАГОЛОВОК: [привлекательный заголовок]
---
[Текст статьи с подзаголовками и параграфами]"""

ARTICLE_REQUEST = """Напиши подробную статью на тему: "{topic}"

Статья должна содержать:
1. Привлекательное введение
2. 3-5 основных разделов с подзаголовками
3. Практические советы или рекомендации
4. Заключение с призывом к действию"""

REWRITER_PROMPT = """Ты - профессиональный рерайтер. Твоя задача - переписать текст так, чтобы:
1. Сохранить весь смысл и факты оригинала
2. Сделать текст полностью уникальным (пройти проверку на антиплагиат)
3. Улучшить читаемость и структуру
4. Сохранить профессиональный стиль
5. Писать на русском языке

Не добавляй комментарии, просто выдай переписанный текст."""

JOURNALIST_PROMPT = (
    "Ты - профессиональный финансовый журналист. Твоя задача - переписать новость, "
    "сделав ее уникальной, интересной и сохранив при этом все факты. Пиши на русском языке."
)


# -----------------
# Parsing of model answers
# -----------------

def parse_generated_article(text: str, topic: str) -> dict:
    """``ЗАГОЛОВОК: ...`` gives the title; the body follows the first ``---``."""
    title = topic
    for line in text.split("\n"):
        if line.startswith("ЗАГОЛОВОК:"):
            title = line.replace("ЗАГОЛОВОК:", "", 1).strip() or topic
            break
    start = text.find("---")
    content = text[start + 3:].strip() if start > -1 else text
    return {"title": title, "content": content}


def parse_rewritten_news(text: str) -> dict:
    lines = text.split("\n")
    title = lines[0].replace("Заголовок:", "").replace("*", "").lstrip("#").strip()
    return {"title": title, "content": "\n".join(lines[1:]).strip()}


# -----------------
# Flows
# -----------------

async def generate_article(llm: LLMClient, topic: str) -> dict:
    topic = (topic or "").strip()
    if not topic:
        raise ValidationError("Введите тему для генерации")
    text = await llm.generate_text(messages=[
        {"role": "system", "content": COPYWRITER_PROMPT},
        {"role": "user", "content": ARTICLE_REQUEST.format(topic=topic)},
    ])
    article = parse_generated_article(text, topic)
    logger.info(f"✅ Статья сгенерирована: {article['title']}")
    return article


async def rewrite_text(llm: LLMClient, text: str) -> str:
    if not (text or "").strip():
        raise ValidationError("Введите текст для рерайта")
    return await llm.generate_text(messages=[
        {"role": "system", "content": REWRITER_PROMPT},
        {"role": "user", "content": f"Перепиши следующий текст, сделав его уникальным:\n\n{text}"},
    ])


async def fetch_headlines(scraper: Scraper, limit: int = 5, source_url: str = BANKI_NEWS_URL) -> list[dict]:
    result = await scraper.scrape(source_url)
    items = []
    for link in result.links:
        url = link.get("url") or ""
        if not any(marker in url for marker in HEADLINE_MARKERS):
            continue
        items.append({
            "title": link.get("text") or "Новости экономики",
            "url": url if url.startswith("http") else f"{BANKI_BASE_URL}{url}",
            "description": "Новость с портала banki.ru",
        })
        if len(items) >= limit:
            break
    logger.info(f"📊 Найдено новостей: {len(items)}")
    return items


async def parse_url(scraper: Scraper, url: str) -> dict:
    if not (url or "").strip():
        raise ValidationError("Введите URL для парсинга")
    result = await scraper.scrape(url)
    return {
        "title": result.metadata.get("title") or "Без названия",
        "url": url,
        "description": result.metadata.get("description") or result.markdown[:200],
        "content": result.markdown[:5000],
    }


async def rewrite_news(llm: LLMClient, scraper: Scraper, url: str) -> dict:
    result = await scraper.scrape(url)
    text = await llm.generate_text(messages=[
        {"role": "system", "content": JOURNALIST_PROMPT},
        {
            "role": "user",
            "content": "Перепиши следующую новость для нашего финансового хаба. "
                       f"Сделай заголовок и содержание уникальными:\n\n{result.markdown[:4000]}",
        },
    ])
    draft = parse_rewritten_news(text)
    draft["url"] = url
    return draft


async def publish_draft(
    session: AsyncSession,
    ctx: SessionContext,
    draft: dict,
    category_id: Optional[str],
    kind: str = "article",
):
    """Store an assist draft as a published article (or news) with a derived slug."""
    if not category_id:
        raise ValidationError("Выберите категорию для сохранения")
    content = (draft.get("content") or "").strip()
    if not content:
        raise ValidationError("Сначала выполните рерайт новости")
    title = (draft.get("title") or "").strip()
    if not title:
        raise ValidationError()

    fields = {
        "title": title,
        "content": content,
        "category_id": category_id,
        "status": "published",
        "excerpt": make_excerpt(content, 200),
    }
    if kind == "news":
        fields["source_url"] = draft.get("url")
    return await create_content(session, kind, ctx.user_id, derive=True, **fields)
