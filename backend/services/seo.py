"""
Sitemap generation and IndexNow notifications.

    entries = await build_sitemap(session, SITE_BASE_URL)
    xml = sitemap_xml(entries)
    html = sitemap_html(entries)
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import INDEXNOW_ENDPOINT, INDEXNOW_KEY, SITE_NAME
from backend.models import Article, News, utcnow
from backend.services.taxonomy import list_categories
from backend.store import Store
from backend.utils import escape_xml

logger = logging.getLogger(__name__)

INDEXNOW_TIMEOUT = 10

STATIC_PAGES = (
    ("/", "Главная", 1.0, "daily"),
    ("/offers", "Офферы", 0.9, "daily"),
    ("/articles", "Статьи", 0.9, "daily"),
    ("/news", "Новости", 0.9, "hourly"),
    ("/forum", "Форум", 0.8, "hourly"),
    ("/rates", "Курсы валют", 0.7, "daily"),
)

# HTML sitemap sections in display order
SECTIONS = ("Главные страницы", "Статьи", "Новости", "Форум", "Офферы")


@dataclass
class SitemapEntry:
    url: str
    lastmod: dt.datetime
    changefreq: str
    priority: float
    title: str = ""


async def build_sitemap(session: AsyncSession, base_url: str) -> list[SitemapEntry]:
    base_url = base_url.rstrip("/")
    now = utcnow()
    entries = [
        SitemapEntry(f"{base_url}{path}", now, freq, priority, title)
        for path, title, priority, freq in STATIC_PAGES
    ]

    published = {"status": "published"}
    for article in await Store(session, Article).list(where=published, order_by=("created_at", "desc")):
        entries.append(SitemapEntry(
            f"{base_url}/articles/{article.slug}", article.created_at or now, "weekly", 0.8, article.title,
        ))
    for item in await Store(session, News).list(where=published, order_by=("created_at", "desc")):
        entries.append(SitemapEntry(
            f"{base_url}/news/{item.slug}", item.created_at or now, "weekly", 0.7, item.title,
        ))
    for category in await list_categories(session, "forum"):
        entries.append(SitemapEntry(
            f"{base_url}/forum/category/{category.id}", category.created_at or now, "daily", 0.6, category.name,
        ))

    logger.info(f"📊 Карта сайта: {len(entries)} адресов")
    return entries


def sitemap_xml(entries: list[SitemapEntry]) -> str:
    urls = "".join(
        "\n  <url>\n"
        f"    <loc>{escape_xml(e.url)}</loc>\n"
        f"    <lastmod>{e.lastmod.date().isoformat()}</lastmod>\n"
        f"    <changefreq>{e.changefreq}</changefreq>\n"
        f"    <priority>{e.priority:.1f}</priority>\n"
        "  </url>"
        for e in entries
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{urls}\n"
        "</urlset>"
    )


def section_for(url: str) -> str:
    path = urlparse(url).path
    if path.startswith("/articles/"):
        return "Статьи"
    if path.startswith("/news/"):
        return "Новости"
    if path.startswith("/forum/"):
        return "Форум"
    if path.startswith("/offers"):
        return "Офферы"
    return "Главные страницы"


def sitemap_html(entries: list[SitemapEntry], generated_at: Optional[dt.datetime] = None) -> str:
    grouped: dict[str, list[SitemapEntry]] = {}
    for entry in entries:
        grouped.setdefault(section_for(entry.url), []).append(entry)

    parts = [
        "<!DOCTYPE html>",
        '<html lang="ru">',
        "<head>",
        '  <meta charset="UTF-8">',
        f"  <title>Карта сайта - {escape_xml(SITE_NAME)}</title>",
        "</head>",
        "<body>",
        "  <h1>Карта сайта</h1>",
        f"  <p>Всего страниц: {len(entries)}</p>",
    ]
    for section in SECTIONS:
        items = grouped.get(section)
        if not items:
            continue
        parts.append(f"  <h2>{section}</h2>")
        parts.append("  <ul>")
        for item in items:
            date = item.lastmod.strftime("%d.%m.%Y") if item.lastmod else ""
            parts.append(
                f'    <li><a href="{escape_xml(item.url)}">{escape_xml(item.title or item.url)}</a>'
                f'<span class="date">{date}</span></li>'
            )
        parts.append("  </ul>")

    generated_at = generated_at or utcnow()
    parts += [
        f'  <div class="footer"><p>Обновлено: {generated_at.strftime("%d.%m.%Y %H:%M")}</p></div>',
        "</body>",
        "</html>",
    ]
    return "\n".join(parts)


def indexnow_payload(url: str, key: str) -> dict:
    host = urlparse(url).hostname or ""
    return {
        "host": host,
        "key": key,
        "keyLocation": f"https://{host}/{key}.txt",
        "urlList": [url],
    }


async def ping_indexnow(url: str, key: str = INDEXNOW_KEY, endpoint: str = INDEXNOW_ENDPOINT) -> bool:
    """Notify search engines about a new URL. Never raises."""
    if not key:
        logger.debug("IndexNow отключён: нет INDEXNOW_KEY")
        return False
    try:
        async with httpx.AsyncClient(timeout=INDEXNOW_TIMEOUT) as client:
            resp = await client.post(endpoint, json=indexnow_payload(url, key))
        if resp.status_code >= 400:
            logger.warning(f"⚠️ IndexNow ответил {resp.status_code} для {url}")
            return False
        logger.info(f"✅ IndexNow: отправлен {url}")
        return True
    except httpx.HTTPError as e:
        logger.warning(f"⚠️ IndexNow: ошибка для {url}: {e}")
        return False
