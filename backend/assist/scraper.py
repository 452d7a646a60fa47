"""
Page scraper: fetch a URL and reduce it to markdown, links and metadata.

Uses httpx for transport and BeautifulSoup for parsing. Non-2xx responses and
transport errors become ``AssistUnavailable``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from backend.config import SCRAPE_TIMEOUT, SCRAPE_USER_AGENT
from backend.errors import AssistUnavailable

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": SCRAPE_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml",
    "Accept-Language": "ru-RU,ru;q=0.9,en-US;q=0.8,en;q=0.7",
}

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
BLOCK_TAGS = HEADING_TAGS + ("p", "li")


@dataclass
class ScrapeResult:
    markdown: str = ""
    links: List[Dict[str, str]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return tag["content"].strip()
    return None


def parse_html(html: str, base_url: str) -> ScrapeResult:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    title = _meta_content(soup, property="og:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()
    description = (
        _meta_content(soup, name="description")
        or _meta_content(soup, property="og:description")
    )

    lines = []
    for el in soup.find_all(BLOCK_TAGS):
        text = el.get_text(" ", strip=True)
        if not text:
            continue
        if el.name in HEADING_TAGS:
            lines.append("#" * int(el.name[1]) + " " + text)
        elif el.name == "li":
            lines.append("- " + text)
        else:
            lines.append(text)

    links = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.startswith(("#", "javascript:", "mailto:")):
            continue
        links.append({"url": urljoin(base_url, href), "text": a.get_text(" ", strip=True)})

    return ScrapeResult(
        markdown="\n\n".join(lines),
        links=links,
        metadata={"title": title, "description": description, "url": base_url},
    )


class Scraper:
    """Fetches pages over one shared ``httpx.AsyncClient``."""

    TIMEOUT = SCRAPE_TIMEOUT

    def __init__(self):
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.TIMEOUT, follow_redirects=True, headers=HEADERS)
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def scrape(self, url: str) -> ScrapeResult:
        client = await self._get_client()
        try:
            resp = await client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Скрапинг {url} не удался: {e}")
            raise AssistUnavailable("Не удалось загрузить страницу")

        result = parse_html(resp.text, str(resp.url))
        logger.info(f"✅ Скрапинг {url}: {len(result.links)} ссылок, {len(result.markdown)} символов")
        return result
