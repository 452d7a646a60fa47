"""
Newsletter subscriptions and currency rates.
"""
import pytest

from backend.errors import DuplicateSubscription, ValidationError
from backend.services import newsletter, rates


class TestNewsletter:

    def test_duplicate_email_is_rejected(self, run):
        async def scenario(session):
            await newsletter.subscribe(session, "ivan@mail.ru")
            with pytest.raises(DuplicateSubscription):
                await newsletter.subscribe(session, "ivan@mail.ru")
            return len(await newsletter.list_subscriptions(session))

        assert run(scenario) == 1

    def test_email_needs_at_sign(self, run):
        async def scenario(session):
            with pytest.raises(ValidationError) as exc:
                await newsletter.subscribe(session, "ivan.mail.ru")
            return exc.value.message

        assert run(scenario) == "Введите корректный email"

    def test_anonymous_owner_by_default(self, run):
        async def scenario(session):
            return (await newsletter.subscribe(session, "a@b.ru")).user_id

        assert run(scenario) == "anonymous"

    def test_unsubscribe_keeps_row_inactive(self, run):
        async def scenario(session):
            await newsletter.subscribe(session, "a@b.ru")
            await newsletter.unsubscribe(session, "a@b.ru")
            return (len(await newsletter.list_subscriptions(session)),
                    len(await newsletter.list_subscriptions(session, active_only=True)))

        assert run(scenario) == (1, 0)


class TestRates:

    def test_defaults_when_table_is_empty(self, run):
        async def scenario(session):
            return [(r["code"], r["rate"], r["name"]) for r in await rates.display_rates(session)]

        assert run(scenario) == [
            ("USD", 91.50, "Доллар США"),
            ("EUR", 99.20, "Евро"),
            ("CNY", 12.65, "Юань"),
        ]

    def test_stored_rows_replace_defaults(self, run, admin_ctx):
        async def scenario(session):
            await rates.create_rate(session, admin_ctx.user_id, code="usd", name="Доллар", rate=90)
            return [(r["code"], r["rate"]) for r in await rates.display_rates(session)]

        assert run(scenario) == [("USD", 90.0)]

    def test_duplicate_codes_are_kept(self, run, admin_ctx):
        async def scenario(session):
            await rates.create_rate(session, admin_ctx.user_id, code="USD", rate=90)
            await rates.create_rate(session, admin_ctx.user_id, code="USD", rate=91)
            return len(await rates.list_rates(session))

        assert run(scenario) == 2

    def test_negative_rate_rejected(self, run, admin_ctx):
        async def scenario(session):
            with pytest.raises(ValidationError):
                await rates.create_rate(session, admin_ctx.user_id, code="USD", rate=-1)
            with pytest.raises(ValidationError):
                await rates.create_rate(session, admin_ctx.user_id, code="", rate=1)

        run(scenario)
