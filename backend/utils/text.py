"""
Утилиты для работы с текстом: slug, разметка статей, поиск, экранирование
"""
from __future__ import annotations

import re
import time
from typing import Optional

SLUG_MAX_LENGTH = 60

_SLUG_DROP = re.compile(r"[^a-z0-9а-яё\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slug_base(title: str) -> str:
    """Slug body without the time suffix, at most 60 characters."""
    base = _SLUG_DROP.sub("", (title or "").lower())
    base = _WHITESPACE.sub("-", base)
    base = _HYPHENS.sub("-", base)
    base = base.strip("-")[:SLUG_MAX_LENGTH]
    return base.strip("-")


def derive_slug(title: str, now_ms: Optional[int] = None) -> str:
    """Human-readable slug with a 4-digit suffix from the epoch-ms clock.

    Deterministic for a fixed title and timestamp:
        derive_slug("Как выбрать карту?", 1700000001234) == "как-выбрать-карту-1234"
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    base = slug_base(title) or "post"
    return f"{base}-{now_ms % 10000:04d}"


def render_content(content: str) -> list[dict]:
    """Split ``##``/``###`` pseudo-markdown into display blocks.

    Each line becomes one block: ``h2``/``h3`` for heading prefixes, ``br``
    for blank lines and ``p`` for everything else.
    """
    blocks = []
    for line in (content or "").split("\n"):
        if line.startswith("## "):
            blocks.append({"type": "h2", "text": line[3:].strip()})
        elif line.startswith("### "):
            blocks.append({"type": "h3", "text": line[4:].strip()})
        elif line.strip() == "":
            blocks.append({"type": "br", "text": ""})
        else:
            blocks.append({"type": "p", "text": line})
    return blocks


def matches_query(query: Optional[str], *fields: Optional[str]) -> bool:
    """Case-folded substring match over any of the fields; empty query matches all."""
    q = (query or "").strip().casefold()
    if not q:
        return True
    return any(q in (f or "").casefold() for f in fields)


def make_excerpt(text: str, length: int = 200) -> str:
    return (text or "")[:length]


def escape_xml(text: str) -> str:
    """Экранирует спецсимволы для XML/HTML"""
    if not text:
        return text or ""
    return (text
            .replace('&', '&amp;')
            .replace('<', '&lt;')
            .replace('>', '&gt;')
            .replace('"', '&quot;')
            .replace("'", '&apos;'))
