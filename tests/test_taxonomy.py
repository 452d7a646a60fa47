"""
Categories: the category/type partition rule and the deletion policy.
"""
import pytest

from backend.errors import CategoryInUse, CategoryTypeMismatch, NotFound, SlugConflict, ValidationError
from backend.models import Offer
from backend.services import offers, taxonomy
from backend.store import Store


async def _category(session, type, slug, name=None):
    return await taxonomy.create_category(session, name=name or slug, slug=slug, type=type)


def _offer_fields(category_id, title="Карта"):
    return {"title": title, "category_id": category_id, "external_url": "https://bank.example/card"}


class TestPartitionRule:

    def test_offer_rejects_article_category(self, run, admin_ctx):
        async def scenario(session):
            article_cat = await _category(session, "article", "finance")
            with pytest.raises(CategoryTypeMismatch):
                await offers.create_offer(session, admin_ctx.user_id, **_offer_fields(article_cat.id))
            return await Store(session, Offer).count()

        assert run(scenario) == 0

    def test_missing_category_is_not_found(self, run, admin_ctx):
        async def scenario(session):
            with pytest.raises(NotFound):
                await offers.create_offer(session, admin_ctx.user_id, **_offer_fields("nope"))

        run(scenario)

    def test_every_stored_offer_points_at_offer_category(self, run, admin_ctx):
        async def scenario(session):
            cards = await _category(session, "offer", "cards")
            forum = await _category(session, "forum", "general")
            await offers.create_offer(session, admin_ctx.user_id, **_offer_fields(cards.id))
            with pytest.raises(CategoryTypeMismatch):
                await offers.create_offer(session, admin_ctx.user_id, **_offer_fields(forum.id))
            stored = await Store(session, Offer).list()
            types = {(await taxonomy.get_category(session, o.category_id)).type for o in stored}
            return types

        assert run(scenario) == {"offer"}

    def test_update_cannot_move_offer_to_other_type(self, run, admin_ctx):
        async def scenario(session):
            cards = await _category(session, "offer", "cards")
            news = await _category(session, "news", "economy")
            offer = await offers.create_offer(session, admin_ctx.user_id, **_offer_fields(cards.id))
            with pytest.raises(CategoryTypeMismatch):
                await offers.update_offer(session, offer.id, category_id=news.id)
            return (await offers.get_offer(session, offer.id)).category_id == cards.id

        assert run(scenario)


class TestCategorySlugs:

    def test_same_slug_allowed_across_types(self, run):
        async def scenario(session):
            await _category(session, "offer", "general")
            await _category(session, "forum", "general")
            return len(await taxonomy.list_categories(session))

        assert run(scenario) == 2

    def test_same_slug_rejected_within_type(self, run):
        async def scenario(session):
            await _category(session, "offer", "cards")
            with pytest.raises(SlugConflict):
                await _category(session, "offer", "cards")

        run(scenario)

    def test_name_and_slug_required(self, run):
        async def scenario(session):
            with pytest.raises(ValidationError):
                await taxonomy.create_category(session, name="", slug="x", type="offer")
            with pytest.raises(ValidationError):
                await taxonomy.create_category(session, name="X", slug="x", type="blog")

        run(scenario)

    def test_listing_orders_by_type_then_name(self, run):
        async def scenario(session):
            await _category(session, "offer", "b", name="Б")
            await _category(session, "article", "z", name="Я")
            await _category(session, "offer", "a", name="А")
            return [(c.type, c.name) for c in await taxonomy.list_categories(session)]

        assert run(scenario) == [("article", "Я"), ("offer", "А"), ("offer", "Б")]


class TestCategoryDeletion:

    def test_unused_category_is_deleted(self, run):
        async def scenario(session):
            cat = await _category(session, "offer", "cards")
            await taxonomy.delete_category(session, cat.id)
            return await taxonomy.list_categories(session)

        assert run(scenario) == []

    def test_used_category_is_refused(self, run, admin_ctx):
        async def scenario(session):
            cat = await _category(session, "offer", "cards")
            await offers.create_offer(session, admin_ctx.user_id, **_offer_fields(cat.id))
            with pytest.raises(CategoryInUse) as exc:
                await taxonomy.delete_category(session, cat.id)
            return exc.value.dependents

        assert run(scenario) == 1

    def test_reassignment_moves_dependents_first(self, run, admin_ctx):
        async def scenario(session):
            old = await _category(session, "offer", "old")
            new = await _category(session, "offer", "new")
            offer = await offers.create_offer(session, admin_ctx.user_id, **_offer_fields(old.id))
            await taxonomy.delete_category(session, old.id, reassign_to=new.id)
            return (await offers.get_offer(session, offer.id)).category_id, new.id

        moved_to, expected = run(scenario)
        assert moved_to == expected

    def test_reassignment_target_must_share_type(self, run, admin_ctx):
        async def scenario(session):
            old = await _category(session, "offer", "old")
            other = await _category(session, "article", "other")
            await offers.create_offer(session, admin_ctx.user_id, **_offer_fields(old.id))
            with pytest.raises(CategoryTypeMismatch):
                await taxonomy.delete_category(session, old.id, reassign_to=other.id)

        run(scenario)

    def test_dangling_reference_gets_fallback_label(self, run):
        async def scenario(session):
            return await taxonomy.label_for(session, "deleted-id")

        assert run(scenario) == "Без категории"
