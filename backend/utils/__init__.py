"""
Утилиты для slug, разметки статей и поиска
"""
from .text import (
    derive_slug,
    escape_xml,
    make_excerpt,
    matches_query,
    render_content,
    slug_base,
)

__all__ = [
    'derive_slug',
    'escape_xml',
    'make_excerpt',
    'matches_query',
    'render_content',
    'slug_base',
]
