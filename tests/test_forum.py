"""
Forum: moderation gate, visibility, locking, thread rendering.
"""
import pytest

from backend.errors import CategoryTypeMismatch, NotFound, TopicLocked, ValidationError
from backend.models import ForumPost
from backend.services import forum, taxonomy
from backend.store import Store


async def _forum_category(session, slug="general"):
    return await taxonomy.create_category(session, name="Общий раздел", slug=slug, type="forum")


class TestModerationGate:

    def test_public_topic_is_pending_until_approved(self, run, user_ctx, other_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, post = await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "Как закрыть кредит?")
            seen_by_author = [t.id for t in await forum.list_topics(session, cat.id, user_ctx)]
            seen_by_other = [t.id for t in await forum.list_topics(session, cat.id, other_ctx)]
            seen_by_guest = [t.id for t in await forum.list_topics(session, cat.id, None)]
            return topic, post, seen_by_author, seen_by_other, seen_by_guest

        topic, post, author, other, guest = run(scenario)
        assert topic.is_approved is False
        assert post.is_approved is False
        assert post.topic_id == topic.id
        assert author == [topic.id]
        assert other == []
        assert guest == []

    def test_approval_is_idempotent(self, run, user_ctx, other_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, post = await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "Текст")
            await forum.approve_topic(session, topic.id)
            await forum.approve_topic(session, topic.id)
            await forum.approve_post(session, post.id)
            await forum.approve_post(session, post.id)
            visible = [t.id for t in await forum.list_topics(session, cat.id, other_ctx)]
            return topic.is_approved, post.is_approved, visible, topic.id

        topic_ok, post_ok, visible, topic_id = run(scenario)
        assert topic_ok and post_ok
        assert visible == [topic_id]

    def test_admin_topic_is_approved_and_may_have_no_posts(self, run, admin_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, post = await forum.create_topic(session, admin_ctx, "Правила", cat.id, via_admin=True)
            return topic.is_approved, post, await Store(session, ForumPost).count({"topic_id": topic.id})

        approved, post, posts = run(scenario)
        assert approved is True
        assert post is None
        assert posts == 0

    def test_public_topic_needs_title_and_content(self, run, user_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            with pytest.raises(ValidationError):
                await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "  ")

        run(scenario)

    def test_topic_requires_forum_category(self, run, user_ctx):
        async def scenario(session):
            cat = await taxonomy.create_category(session, name="Карты", slug="cards", type="offer")
            with pytest.raises(CategoryTypeMismatch):
                await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "Текст")

        run(scenario)

    def test_moderation_queue_filters_pending(self, run, admin_ctx, user_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            await forum.create_topic(session, admin_ctx, "Правила", cat.id, "Читать всем", via_admin=True)
            await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "Текст")
            everything = await forum.moderation_queue(session)
            pending = await forum.moderation_queue(session, pending_only=True)
            return (len(everything["topics"]), len(everything["posts"]),
                    [t.title for t in pending["topics"]], len(pending["posts"]))

        assert run(scenario) == (2, 2, ["Вопрос"], 1)


class TestReplies:

    def test_reply_updates_last_post_at(self, run, admin_ctx, user_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, _ = await forum.create_topic(session, admin_ctx, "Тема", cat.id, "Первое", via_admin=True)
            before = topic.last_post_at
            post = await forum.reply(session, user_ctx, topic.id, "Ответ")
            return before, topic.last_post_at, post.is_approved

        before, after, approved = run(scenario)
        assert after >= before
        assert approved is False

    def test_locked_topic_rejects_replies(self, run, admin_ctx, user_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, _ = await forum.create_topic(session, admin_ctx, "Тема", cat.id, "Первое", via_admin=True)
            await forum.set_locked(session, topic.id, True)
            with pytest.raises(TopicLocked):
                await forum.reply(session, user_ctx, topic.id, "Ответ")

        run(scenario)

    def test_pending_topic_of_someone_else_cannot_be_answered(self, run, user_ctx, other_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, _ = await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "Текст")
            with pytest.raises(NotFound):
                await forum.reply(session, other_ctx, topic.id, "Ответ")

        run(scenario)


class TestThread:

    def test_open_topic_counts_views_and_marks_original(self, run, admin_ctx, user_ctx, other_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, first = await forum.create_topic(session, admin_ctx, "Тема", cat.id, "Первое", via_admin=True)
            mine = await forum.reply(session, user_ctx, topic.id, "Мой ответ")
            await forum.open_topic(session, topic.id, other_ctx)
            thread = await forum.open_topic(session, topic.id, user_ctx)
            return thread.topic.views, [p.id for p in thread.posts], thread.original_post_id, first.id, mine.id

        views, post_ids, original, first_id, mine_id = run(scenario)
        assert views == 2
        assert post_ids == [first_id, mine_id]
        assert original == first_id

    def test_original_post_is_earliest_even_when_hidden(self, run, admin_ctx, user_ctx, other_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, opening = await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "Первое")
            await forum.approve_topic(session, topic.id)
            answer = await forum.reply(session, admin_ctx, topic.id, "Ответ модератора", via_admin=True)
            by_other = await forum.open_topic(session, topic.id, other_ctx)
            by_author = await forum.open_topic(session, topic.id, user_ctx)
            return (
                opening.id, answer.id,
                [p.id for p in by_other.posts], by_other.original_post_id,
                [p.id for p in by_author.posts], by_author.original_post_id,
            )

        opening_id, answer_id, other_posts, other_original, author_posts, author_original = run(scenario)
        assert other_posts == [answer_id]
        assert other_original is None
        assert author_posts == [opening_id, answer_id]
        assert author_original == opening_id

    def test_approving_topic_leaves_opening_post_pending(self, run, user_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, opening = await forum.create_topic(session, user_ctx, "Вопрос", cat.id, "Первое")
            await forum.approve_topic(session, topic.id)
            return topic.is_approved, opening.is_approved

        assert run(scenario) == (True, False)

    def test_pinned_topics_come_first(self, run, admin_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            old, _ = await forum.create_topic(session, admin_ctx, "Старая", cat.id, "x", via_admin=True)
            await forum.create_topic(session, admin_ctx, "Новая", cat.id, "x", via_admin=True)
            await forum.set_pinned(session, old.id, True)
            return [t.title for t in await forum.list_topics(session, cat.id)]

        assert run(scenario) == ["Старая", "Новая"]

    def test_deleting_topic_deletes_posts(self, run, admin_ctx, user_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            topic, _ = await forum.create_topic(session, admin_ctx, "Тема", cat.id, "Первое", via_admin=True)
            await forum.reply(session, user_ctx, topic.id, "Ответ")
            await forum.delete_topic(session, topic.id)
            return await Store(session, ForumPost).count()

        assert run(scenario) == 0

    def test_latest_topics_only_approved(self, run, admin_ctx, user_ctx):
        async def scenario(session):
            cat = await _forum_category(session)
            await forum.create_topic(session, admin_ctx, "Одобрена", cat.id, "x", via_admin=True)
            await forum.create_topic(session, user_ctx, "Ждёт", cat.id, "x")
            return [t.title for t in await forum.latest_topics(session)]

        assert run(scenario) == ["Одобрена"]
