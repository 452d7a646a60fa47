"""
Slug derivation, content rendering and search helpers.
"""
from backend.utils import derive_slug, escape_xml, make_excerpt, matches_query, render_content, slug_base


class TestSlug:

    def test_fixed_title_and_clock_give_fixed_slug(self):
        assert derive_slug("Как выбрать карту?", now_ms=1700000001234) == "как-выбрать-карту-1234"

    def test_suffix_is_zero_padded(self):
        assert derive_slug("Ипотека", now_ms=1700000000007) == "ипотека-0007"

    def test_punctuation_and_spaces_collapse(self):
        assert slug_base("  Топ-5   инвестиций --- 2026!!! ") == "топ-5-инвестиций-2026"

    def test_base_is_truncated_to_60_without_trailing_hyphen(self):
        title = "а" * 59 + " бвг"
        base = slug_base(title)
        assert len(base) <= 60
        assert not base.endswith("-")

    def test_empty_base_falls_back(self):
        assert derive_slug("???", now_ms=1234) == "post-1234"

    def test_latin_is_kept(self):
        assert derive_slug("Visa Platinum", now_ms=42) == "visa-platinum-0042"


class TestRenderContent:

    def test_headings_paragraphs_and_breaks(self):
        blocks = render_content("## Intro\n\nText\n### Sub")
        assert blocks == [
            {"type": "h2", "text": "Intro"},
            {"type": "br", "text": ""},
            {"type": "p", "text": "Text"},
            {"type": "h3", "text": "Sub"},
        ]

    def test_hash_without_space_is_a_paragraph(self):
        assert render_content("##нет") == [{"type": "p", "text": "##нет"}]

    def test_empty_content(self):
        assert render_content("") == [{"type": "br", "text": ""}]


class TestSearchHelpers:

    def test_empty_query_matches_everything(self):
        assert matches_query("", "что угодно")
        assert matches_query(None, None)

    def test_cyrillic_case_folding(self):
        assert matches_query("КАРТА", "Кредитная карта")
        assert not matches_query("вклад", "Кредитная карта", None)

    def test_excerpt_and_escape(self):
        assert make_excerpt("x" * 300) == "x" * 200
        assert escape_xml('<a href="?a=1&b=2">') == "&lt;a href=&quot;?a=1&amp;b=2&quot;&gt;"
