"""Public forum -- categories, topic lists, threads, posting."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth import SessionContext, current_user, optional_user
from backend.database import get_session
from backend.schemas import (
    CategoryOut,
    ForumCategoryOut,
    PostOut,
    ReplyIn,
    ThreadOut,
    TopicCreated,
    TopicIn,
    TopicOut,
)
from backend.services import forum
from backend.services.taxonomy import require_category

router = APIRouter(prefix="/forum", tags=["forum"])


def thread_out(thread: forum.TopicThread) -> ThreadOut:
    posts = []
    for post in thread.posts:
        item = PostOut.model_validate(post)
        item.is_original = post.id == thread.original_post_id
        posts.append(item)
    return ThreadOut(topic=TopicOut.model_validate(thread.topic), posts=posts)


@router.get("", response_model=list[ForumCategoryOut])
async def forum_index(session: AsyncSession = Depends(get_session)):
    return [
        ForumCategoryOut(category=CategoryOut.model_validate(row["category"]), topics=row["topics"])
        for row in await forum.forum_overview(session)
    ]


@router.get("/latest", response_model=list[TopicOut])
async def latest_topics(session: AsyncSession = Depends(get_session)):
    return await forum.latest_topics(session)


@router.get("/category/{category_id}")
async def category_topics(
    category_id: str,
    ctx: Optional[SessionContext] = Depends(optional_user),
    session: AsyncSession = Depends(get_session),
):
    category = await require_category(session, category_id, "forum_topic")
    topics = await forum.list_topics(session, category_id, ctx)
    return {
        "category": CategoryOut.model_validate(category),
        "topics": [TopicOut.model_validate(t) for t in topics],
    }


@router.post("/category/{category_id}/topics", response_model=TopicCreated, status_code=201)
async def create_topic(
    category_id: str,
    body: TopicIn,
    ctx: SessionContext = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    topic, post = await forum.create_topic(session, ctx, body.title, category_id, body.content)
    return TopicCreated(
        topic=TopicOut.model_validate(topic),
        post=PostOut.model_validate(post) if post else None,
    )


@router.get("/topic/{topic_id}", response_model=ThreadOut)
async def open_topic(
    topic_id: str,
    ctx: Optional[SessionContext] = Depends(optional_user),
    session: AsyncSession = Depends(get_session),
):
    return thread_out(await forum.open_topic(session, topic_id, ctx))


@router.post("/topic/{topic_id}/replies", response_model=PostOut, status_code=201)
async def reply(
    topic_id: str,
    body: ReplyIn,
    ctx: SessionContext = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    return await forum.reply(session, ctx, topic_id, body.content)
