"""
Credit tools and live search.
"""
import random

import pytest

from backend.errors import ValidationError
from backend.services import content, offers, search, taxonomy, tools


class TestCreditCalculator:

    def test_annuity_payment(self):
        result = tools.credit_calculator(100_000, 12, 12)
        assert result["monthly_payment"] == pytest.approx(8884.88, abs=0.01)
        assert result["total_payment"] == pytest.approx(106618.55, abs=0.05)
        assert result["overpayment"] == pytest.approx(6618.55, abs=0.05)

    def test_zero_rate_splits_evenly(self):
        result = tools.credit_calculator(120_000, 0, 12)
        assert result == {"monthly_payment": 10000.0, "total_payment": 120000.0, "overpayment": 0.0}

    def test_amount_and_term_must_be_positive(self):
        with pytest.raises(ValidationError):
            tools.credit_calculator(0, 10, 12)
        with pytest.raises(ValidationError):
            tools.credit_calculator(1000, 10, 0)


class TestCreditRating:

    @pytest.mark.parametrize("score,label", [
        (850, "Отличный"),
        (750, "Отличный"),
        (749, "Хороший"),
        (650, "Хороший"),
        (600, "Средний"),
        (549, "Низкий"),
        (300, "Низкий"),
    ])
    def test_tiers(self, score, label):
        assert tools.credit_rating(score)["label"] == label

    def test_progress_scale(self):
        assert tools.credit_rating(300)["progress"] == 0.0
        assert tools.credit_rating(850)["progress"] == 100.0

    def test_simulated_score_in_range(self):
        rng = random.Random(7)
        scores = [tools.simulate_score(rng) for _ in range(200)]
        assert min(scores) >= 300
        assert max(scores) <= 850


class TestLiveSearch:

    def test_short_query_returns_nothing(self, run):
        async def scenario(session):
            return await search.live_search(session, "к")

        assert run(scenario) == []

    def test_offers_and_published_articles(self, run, admin_ctx):
        async def scenario(session):
            offer_cat = await taxonomy.create_category(session, name="Карты", slug="cards", type="offer")
            art_cat = await taxonomy.create_category(session, name="Финансы", slug="finance", type="article")
            await offers.create_offer(session, admin_ctx.user_id, title="Кредитная карта",
                                      category_id=offer_cat.id, external_url="https://x")
            await content.create_content(session, "article", admin_ctx.user_id, title="Как выбрать карта-бонус",
                                         slug="choose", category_id=art_cat.id, content="x", status="published")
            await content.create_content(session, "article", admin_ctx.user_id, title="Черновик карта",
                                         slug="draft", category_id=art_cat.id, content="x", status="draft")
            return await search.live_search(session, "карта")

        hits = run(scenario)
        assert [(h["type"], h["slug"]) for h in hits] == [("offer", None), ("article", "choose")]
