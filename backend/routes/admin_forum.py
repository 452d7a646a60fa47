"""Admin forum moderation -- categories, topics, posts, approval, pin / lock."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth import SessionContext, require_admin
from backend.database import get_session
from backend.schemas import (
    AdminTopicIn,
    CategoryIn,
    CategoryOut,
    FlagIn,
    ModerationQueue,
    PostOut,
    ReplyIn,
    TopicCreated,
    TopicOut,
    TopicUpdate,
)
from backend.services import forum, taxonomy

router = APIRouter(prefix="/admin/forum", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/categories", response_model=list[CategoryOut])
async def list_forum_categories(session: AsyncSession = Depends(get_session)):
    return await taxonomy.list_categories(session, "forum")


@router.post("/categories", response_model=CategoryOut, status_code=201)
async def create_forum_category(
    body: CategoryIn,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    fields = body.model_dump()
    fields["type"] = "forum"
    return await taxonomy.create_category(session, user_id=ctx.user_id, **fields)


@router.get("/queue", response_model=ModerationQueue)
async def moderation_queue(pending_only: bool = False, session: AsyncSession = Depends(get_session)):
    queue = await forum.moderation_queue(session, pending_only=pending_only)
    return ModerationQueue(
        topics=[TopicOut.model_validate(t) for t in queue["topics"]],
        posts=[PostOut.model_validate(p) for p in queue["posts"]],
    )


@router.post("/topics", response_model=TopicCreated, status_code=201)
async def create_topic(
    body: AdminTopicIn,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    topic, post = await forum.create_topic(
        session, ctx, body.title, body.category_id, body.content, via_admin=True,
    )
    return TopicCreated(
        topic=TopicOut.model_validate(topic),
        post=PostOut.model_validate(post) if post else None,
    )


@router.patch("/topics/{topic_id}", response_model=TopicOut)
async def update_topic(topic_id: str, body: TopicUpdate, session: AsyncSession = Depends(get_session)):
    return await forum.update_topic(session, topic_id, **body.model_dump(exclude_unset=True))


@router.delete("/topics/{topic_id}")
async def delete_topic(topic_id: str, session: AsyncSession = Depends(get_session)):
    await forum.delete_topic(session, topic_id)
    return {"ok": True}


@router.post("/topics/{topic_id}/approve", response_model=TopicOut)
async def approve_topic(topic_id: str, session: AsyncSession = Depends(get_session)):
    return await forum.approve_topic(session, topic_id)


@router.post("/topics/{topic_id}/pin", response_model=TopicOut)
async def pin_topic(topic_id: str, body: FlagIn, session: AsyncSession = Depends(get_session)):
    return await forum.set_pinned(session, topic_id, body.value)


@router.post("/topics/{topic_id}/lock", response_model=TopicOut)
async def lock_topic(topic_id: str, body: FlagIn, session: AsyncSession = Depends(get_session)):
    return await forum.set_locked(session, topic_id, body.value)


@router.post("/topics/{topic_id}/replies", response_model=PostOut, status_code=201)
async def admin_reply(
    topic_id: str,
    body: ReplyIn,
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return await forum.reply(session, ctx, topic_id, body.content, via_admin=True)


@router.post("/posts/{post_id}/approve", response_model=PostOut)
async def approve_post(post_id: str, session: AsyncSession = Depends(get_session)):
    return await forum.approve_post(session, post_id)


@router.delete("/posts/{post_id}")
async def delete_post(post_id: str, session: AsyncSession = Depends(get_session)):
    await forum.delete_post(session, post_id)
    return {"ok": True}
