"""
Forum topics, posts and the moderation gate.

Public writes land pending (``PUBLIC_DEFAULT_APPROVAL``) and are visible only
to their author until an admin approves them; admin writes are approved on
creation. Approval is one-way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth import SessionContext
from backend.errors import NotFound, TopicLocked, ValidationError
from backend.models import ForumPost, ForumTopic, new_id, utcnow
from backend.services.taxonomy import list_categories, require_category
from backend.store import Store

logger = logging.getLogger(__name__)

PUBLIC_DEFAULT_APPROVAL = False
ADMIN_DEFAULT_APPROVAL = True


@dataclass
class TopicThread:
    topic: ForumTopic
    posts: list = field(default_factory=list)
    # earliest post of the whole topic; None when the viewer cannot see it
    original_post_id: Optional[str] = None


def _approval(via_admin: bool) -> bool:
    return ADMIN_DEFAULT_APPROVAL if via_admin else PUBLIC_DEFAULT_APPROVAL


def is_visible(row, ctx: Optional[SessionContext]) -> bool:
    if row.is_approved:
        return True
    return ctx is not None and row.author_id == ctx.user_id


async def get_topic(session: AsyncSession, topic_id: str) -> ForumTopic:
    topic = await Store(session, ForumTopic).get(topic_id)
    if topic is None:
        raise NotFound("Тема не найдена")
    return topic


# -----------------
# Writes
# -----------------

async def create_topic(
    session: AsyncSession,
    ctx: SessionContext,
    title: str,
    category_id: str,
    content: str = "",
    via_admin: bool = False,
) -> tuple[ForumTopic, Optional[ForumPost]]:
    """Create a topic and, when content is given, its opening post in one commit."""
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or (not via_admin and not content):
        raise ValidationError()
    await require_category(session, category_id, "forum_topic")

    approved = _approval(via_admin)
    now = utcnow()
    topic = ForumTopic(
        id=new_id(),
        title=title,
        category_id=category_id,
        author_id=ctx.user_id,
        user_id=ctx.user_id,
        is_approved=approved,
        created_at=now,
        last_post_at=now if content else None,
    )
    session.add(topic)

    post = None
    if content:
        post = ForumPost(
            id=new_id(),
            topic_id=topic.id,
            content=content,
            author_id=ctx.user_id,
            user_id=ctx.user_id,
            is_approved=approved,
            created_at=now,
        )
        session.add(post)

    await session.commit()
    logger.info(f"✅ Тема создана: {topic.id} (approved={approved})")
    return topic, post


async def reply(
    session: AsyncSession,
    ctx: SessionContext,
    topic_id: str,
    content: str,
    via_admin: bool = False,
) -> ForumPost:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Введите текст ответа")
    topic = await get_topic(session, topic_id)
    if topic.is_locked:
        raise TopicLocked()
    if not via_admin and not is_visible(topic, ctx):
        raise NotFound("Тема не найдена")

    now = utcnow()
    post = ForumPost(
        id=new_id(),
        topic_id=topic.id,
        content=content,
        author_id=ctx.user_id,
        user_id=ctx.user_id,
        is_approved=_approval(via_admin),
        created_at=now,
    )
    session.add(post)
    topic.last_post_at = now
    await session.commit()
    return post


async def approve_topic(session: AsyncSession, topic_id: str) -> ForumTopic:
    """Approve the topic only; its opening post keeps its own flag."""
    topic = await get_topic(session, topic_id)
    if topic.is_approved:
        return topic
    return await Store(session, ForumTopic).update(topic_id, is_approved=True)


async def approve_post(session: AsyncSession, post_id: str) -> ForumPost:
    store = Store(session, ForumPost)
    post = await store.get(post_id)
    if post is None:
        raise NotFound("Сообщение не найдено")
    if post.is_approved:
        return post
    return await store.update(post_id, is_approved=True)


async def set_pinned(session: AsyncSession, topic_id: str, pinned: bool) -> ForumTopic:
    return await Store(session, ForumTopic).update(topic_id, is_pinned=pinned)


async def set_locked(session: AsyncSession, topic_id: str, locked: bool) -> ForumTopic:
    return await Store(session, ForumTopic).update(topic_id, is_locked=locked)


async def update_topic(session: AsyncSession, topic_id: str, **fields) -> ForumTopic:
    if "title" in fields and not (fields["title"] or "").strip():
        raise ValidationError()
    if "category_id" in fields:
        await require_category(session, fields["category_id"], "forum_topic")
    return await Store(session, ForumTopic).update(topic_id, **fields)


async def delete_topic(session: AsyncSession, topic_id: str):
    topic = await get_topic(session, topic_id)
    await session.execute(delete(ForumPost).where(ForumPost.topic_id == topic.id))
    await session.delete(topic)
    await session.commit()
    logger.info(f"🗑 Тема удалена вместе с сообщениями: {topic_id}")


async def delete_post(session: AsyncSession, post_id: str):
    await Store(session, ForumPost).delete(post_id)


# -----------------
# Reads
# -----------------

async def open_topic(session: AsyncSession, topic_id: str, ctx: Optional[SessionContext] = None) -> TopicThread:
    """Topic detail: counts the view and returns visible posts oldest first."""
    store = Store(session, ForumTopic)
    topic = await get_topic(session, topic_id)
    if not is_visible(topic, ctx):
        raise NotFound("Тема не найдена")
    await store.increment(topic.id, "views")

    posts = await Store(session, ForumPost).list(
        where={"topic_id": topic.id},
        order_by=[("created_at", "asc"), ("id", "asc")],
    )
    opening = posts[0] if posts else None
    return TopicThread(
        topic=topic,
        posts=[p for p in posts if is_visible(p, ctx)],
        original_post_id=opening.id if opening is not None and is_visible(opening, ctx) else None,
    )


async def list_topics(
    session: AsyncSession,
    category_id: str,
    ctx: Optional[SessionContext] = None,
) -> list[ForumTopic]:
    """Pinned topics first, then newest."""
    rows = await Store(session, ForumTopic).list(
        where={"category_id": category_id},
        order_by=[("is_pinned", "desc"), ("created_at", "desc")],
    )
    return [t for t in rows if is_visible(t, ctx)]


async def latest_topics(session: AsyncSession, limit: int = 5) -> list[ForumTopic]:
    return await Store(session, ForumTopic).list(
        where={"is_approved": True},
        order_by=("created_at", "desc"),
        limit=limit,
    )


async def forum_overview(session: AsyncSession) -> list[dict]:
    """Forum categories with their number of approved topics."""
    store = Store(session, ForumTopic)
    result = []
    for category in await list_categories(session, "forum"):
        topics = await store.count({"category_id": category.id, "is_approved": True})
        result.append({"category": category, "topics": topics})
    return result


async def moderation_queue(session: AsyncSession, pending_only: bool = False) -> dict:
    """Everything for the admin panel, newest first."""
    where = {"is_approved": False} if pending_only else None
    topics = await Store(session, ForumTopic).list(where=where, order_by=("created_at", "desc"))
    posts = await Store(session, ForumPost).list(where=where, order_by=("created_at", "desc"))
    return {"topics": topics, "posts": posts}
