"""
SQLAlchemy ORM models -- content store schema for M-etod Hub.

Tables
------
categories                -- taxonomy, partitioned by type (offer/article/forum/news)
offers                    -- partner financial products with affiliate links
articles                  -- editorial articles (slug-routed)
news                      -- news items, optionally imported from a scraped source
forum_topics              -- discussion threads
forum_posts               -- replies inside a topic
currency_rates            -- manually maintained exchange rates
newsletter_subscriptions  -- e-mail subscribers
users                     -- registered accounts
role_grants               -- seeded role assignments by e-mail
auth_sessions             -- bearer tokens
password_resets           -- one-shot reset tokens
"""

from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from .database import Base

CATEGORY_TYPES = ("offer", "article", "forum", "news")
ARTICLE_STATUSES = ("draft", "published")
ROLES = ("user", "admin")


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------

class Category(Base):
    __tablename__ = "categories"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    type = Column(String(16), nullable=False, index=True)
    description = Column(Text, nullable=True)
    user_id = Column(String(64), nullable=False, default="system")
    created_at = Column(DateTime, default=utcnow)

    # slug is unique inside a type partition, not globally
    __table_args__ = (
        UniqueConstraint("type", "slug", name="uq_categories_type_slug"),
    )


# ---------------------------------------------------------------------------
# Offers
# ---------------------------------------------------------------------------

class Offer(Base):
    __tablename__ = "offers"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(512), nullable=False)
    description = Column(Text, default="")
    image_url = Column(String(1024), nullable=True)
    external_url = Column(String(1024), nullable=False)
    category_id = Column(String(32), nullable=False, index=True)
    rating = Column(Float, default=0, nullable=False)
    is_featured = Column(Boolean, default=False, index=True, nullable=False)
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)


# ---------------------------------------------------------------------------
# Articles & News
# ---------------------------------------------------------------------------

class Article(Base):
    __tablename__ = "articles"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(512), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    category_id = Column(String(32), nullable=False, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)
    status = Column(String(16), default="draft", index=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    meta_title = Column(String(512), nullable=True)
    meta_description = Column(Text, nullable=True)
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)


class News(Base):
    __tablename__ = "news"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(512), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    category_id = Column(String(32), nullable=False, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, default="")
    image_url = Column(String(1024), nullable=True)
    source_url = Column(String(1024), nullable=True)
    status = Column(String(16), default="published", index=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    meta_title = Column(String(512), nullable=True)
    meta_description = Column(Text, nullable=True)
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)

    __table_args__ = (
        Index("ix_news_status_category", "status", "category_id"),
    )


# ---------------------------------------------------------------------------
# Forum
# ---------------------------------------------------------------------------

class ForumTopic(Base):
    __tablename__ = "forum_topics"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(512), nullable=False)
    category_id = Column(String(32), nullable=False, index=True)
    author_id = Column(String(64), nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)
    is_pinned = Column(Boolean, default=False, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    last_post_at = Column(DateTime, nullable=True)
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)


class ForumPost(Base):
    __tablename__ = "forum_posts"

    id = Column(String(32), primary_key=True, default=new_id)
    topic_id = Column(
        String(32), ForeignKey("forum_topics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content = Column(Text, nullable=False)
    author_id = Column(String(64), nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)


# ---------------------------------------------------------------------------
# Rates & Newsletter
# ---------------------------------------------------------------------------

class CurrencyRate(Base):
    __tablename__ = "currency_rates"

    id = Column(String(32), primary_key=True, default=new_id)
    code = Column(String(8), nullable=False, index=True)  # several rows per code are allowed
    name = Column(String(128), default="")
    rate = Column(Float, nullable=False, default=0)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow)


class NewsletterSubscription(Base):
    __tablename__ = "newsletter_subscriptions"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(320), nullable=False, unique=True)
    is_active = Column(Boolean, default=True, nullable=False)
    user_id = Column(String(64), default="anonymous")
    created_at = Column(DateTime, default=utcnow)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(320), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=True)
    role = Column(String(16), default="user", nullable=False)
    password_hash = Column(String(128), nullable=False)
    salt = Column(String(64), nullable=False)
    email_verified = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)


class RoleGrant(Base):
    __tablename__ = "role_grants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), nullable=False, unique=True)
    role = Column(String(16), nullable=False, default="admin")
    created_at = Column(DateTime, default=utcnow)


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(128), nullable=False, unique=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class PasswordReset(Base):
    __tablename__ = "password_resets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(128), nullable=False, unique=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)
