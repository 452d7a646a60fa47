"""
Sitemap, IndexNow and the admin dashboard.
"""
import asyncio
import datetime as dt

from backend.services import content, dashboard, forum, newsletter, seo, taxonomy
from backend.services.seo import SitemapEntry


async def _publish_some(session, ctx):
    art_cat = await taxonomy.create_category(session, name="Финансы", slug="finance", type="article")
    news_cat = await taxonomy.create_category(session, name="Экономика", slug="economy", type="news")
    await taxonomy.create_category(session, name="Общий раздел", slug="general", type="forum")
    await content.create_content(session, "article", ctx.user_id, title="Вклады & ставки",
                                 slug="deposits", category_id=art_cat.id, content="x", status="published")
    await content.create_content(session, "article", ctx.user_id, title="Черновик",
                                 slug="draft", category_id=art_cat.id, content="x", status="draft")
    await content.create_content(session, "news", ctx.user_id, title="ЦБ",
                                 slug="cb", category_id=news_cat.id, content="x")


class TestSitemap:

    def test_entries_cover_static_and_published(self, run, admin_ctx):
        async def scenario(session):
            await _publish_some(session, admin_ctx)
            return await seo.build_sitemap(session, "https://metod.ru/")

        entries = run(scenario)
        urls = [e.url for e in entries]
        assert len(entries) == len(seo.STATIC_PAGES) + 3
        assert urls[0] == "https://metod.ru/"
        assert "https://metod.ru/articles/deposits" in urls
        assert "https://metod.ru/news/cb" in urls
        assert "https://metod.ru/articles/draft" not in urls
        priorities = {e.url: e.priority for e in entries}
        assert priorities["https://metod.ru/articles/deposits"] == 0.8
        assert priorities["https://metod.ru/news/cb"] == 0.7

    def test_xml_is_escaped(self):
        entry = SitemapEntry("https://metod.ru/search?a=1&b=2", dt.datetime(2026, 3, 5), "daily", 0.5)
        xml = seo.sitemap_xml([entry])
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert "<loc>https://metod.ru/search?a=1&amp;b=2</loc>" in xml
        assert "<lastmod>2026-03-05</lastmod>" in xml
        assert "<priority>0.5</priority>" in xml

    def test_html_groups_sections(self):
        when = dt.datetime(2026, 3, 5, 14, 30)
        entries = [
            SitemapEntry("https://metod.ru/", when, "daily", 1.0, "Главная"),
            SitemapEntry("https://metod.ru/offers", when, "daily", 0.9, "Офферы"),
            SitemapEntry("https://metod.ru/news/cb", when, "weekly", 0.7, "ЦБ"),
        ]
        html = seo.sitemap_html(entries, generated_at=when)
        assert "<h2>Главные страницы</h2>" in html
        assert "<h2>Новости</h2>" in html
        assert "<h2>Офферы</h2>" in html
        assert "<h2>Статьи</h2>" not in html
        assert "05.03.2026" in html
        assert "Обновлено: 05.03.2026 14:30" in html
        assert html.index("<h2>Новости</h2>") < html.index("<h2>Офферы</h2>")


class TestIndexNow:

    def test_payload(self):
        payload = seo.indexnow_payload("https://metod.ru/articles/deposits", "abc123")
        assert payload == {
            "host": "metod.ru",
            "key": "abc123",
            "keyLocation": "https://metod.ru/abc123.txt",
            "urlList": ["https://metod.ru/articles/deposits"],
        }

    def test_no_key_means_no_ping(self):
        assert asyncio.run(seo.ping_indexnow("https://metod.ru/articles/x", key="")) is False


class TestDashboard:

    def test_seed_is_idempotent(self, run, admin_ctx):
        async def scenario(session):
            first = await dashboard.seed_demo_data(session, admin_ctx)
            await dashboard.seed_demo_data(session, admin_ctx)
            return first, await dashboard.stats(session)

        summary, stats = run(scenario)
        assert summary == {
            "categories": len(dashboard.DEMO_CATEGORIES),
            "offers": len(dashboard.DEMO_OFFERS),
            "articles": len(dashboard.DEMO_ARTICLES),
            "currency_rates": len(dashboard.DEMO_RATES),
        }
        assert stats["categories"] == len(dashboard.DEMO_CATEGORIES)
        assert stats["offers"] == len(dashboard.DEMO_OFFERS)
        assert stats["articles"] == len(dashboard.DEMO_ARTICLES)
        assert stats["news"] == 0

    def test_stats_count_pending_and_active(self, run, admin_ctx, user_ctx):
        async def scenario(session):
            cat = await taxonomy.create_category(session, name="Общий", slug="general", type="forum")
            await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "Текст")
            await newsletter.subscribe(session, "a@b.ru")
            await newsletter.subscribe(session, "c@d.ru")
            await newsletter.unsubscribe(session, "c@d.ru")
            return await dashboard.stats(session)

        stats = run(scenario)
        assert stats["topics"] == 1
        assert stats["pending_topics"] == 1
        assert stats["pending_posts"] == 1
        assert stats["subscribers"] == 1
