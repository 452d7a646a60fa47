"""Pydantic schemas for FastAPI request / response models."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from backend.store import to_bool


class _Flags(BaseModel):
    """Accepts 0/1, "0"/"1" and booleans for ``is_*`` flags."""

    @field_validator("is_featured", "is_approved", "is_pinned", "is_locked", "is_active", "value",
                     mode="before", check_fields=False)
    @classmethod
    def _normalize_flag(cls, v):
        return None if v is None else to_bool(v)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

class CategoryIn(BaseModel):
    name: str
    slug: str
    type: str
    description: str = ""


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None


class CategoryOut(BaseModel):
    id: str
    name: str
    slug: str
    type: str
    description: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class ForumCategoryOut(BaseModel):
    category: CategoryOut
    topics: int = 0


# ---------------------------------------------------------------------------
# Offers
# ---------------------------------------------------------------------------

class OfferIn(_Flags):
    title: str
    description: str = ""
    image_url: Optional[str] = None
    external_url: str
    category_id: str
    rating: float = Field(0, ge=0, le=5)
    is_featured: bool = False


class OfferUpdate(_Flags):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    external_url: Optional[str] = None
    category_id: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_featured: Optional[bool] = None


class OfferOut(_Flags):
    id: str
    title: str
    description: Optional[str] = ""
    image_url: Optional[str] = None
    external_url: str
    category_id: str
    rating: float = 0
    is_featured: bool = False
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Articles & News
# ---------------------------------------------------------------------------

class ArticleIn(_Flags):
    title: str
    slug: Optional[str] = None
    derive_slug: bool = False
    category_id: str
    content: str
    excerpt: Optional[str] = None
    image_url: Optional[str] = None
    status: str = "draft"
    is_featured: bool = False
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class NewsIn(ArticleIn):
    status: str = "published"
    source_url: Optional[str] = None


class ContentUpdate(_Flags):
    title: Optional[str] = None
    slug: Optional[str] = None
    category_id: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    image_url: Optional[str] = None
    source_url: Optional[str] = None
    status: Optional[str] = None
    is_featured: Optional[bool] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class ArticleOut(_Flags):
    id: str
    title: str
    slug: str
    category_id: str
    content: str
    excerpt: Optional[str] = None
    image_url: Optional[str] = None
    status: str
    is_featured: bool = False
    views: int = 0
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class NewsOut(ArticleOut):
    source_url: Optional[str] = None


class ContentBlock(BaseModel):
    type: str
    text: str = ""


class ArticleDetail(BaseModel):
    article: ArticleOut
    category_name: str
    blocks: list[ContentBlock] = []


class NewsDetail(BaseModel):
    news: NewsOut
    category_name: str
    blocks: list[ContentBlock] = []
    related: list[NewsOut] = []


class NewsPage(BaseModel):
    featured: list[NewsOut] = []
    regular: list[NewsOut] = []


# ---------------------------------------------------------------------------
# Forum
# ---------------------------------------------------------------------------

class TopicIn(BaseModel):
    title: str
    content: str = ""


class AdminTopicIn(TopicIn):
    category_id: str


class TopicUpdate(_Flags):
    title: Optional[str] = None
    category_id: Optional[str] = None
    is_pinned: Optional[bool] = None
    is_locked: Optional[bool] = None


class ReplyIn(BaseModel):
    content: str


class FlagIn(_Flags):
    value: bool = True


class TopicOut(_Flags):
    id: str
    title: str
    category_id: str
    author_id: str
    is_approved: bool = False
    is_pinned: bool = False
    is_locked: bool = False
    views: int = 0
    last_post_at: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class PostOut(_Flags):
    id: str
    topic_id: str
    content: str
    author_id: str
    is_approved: bool = False
    is_original: bool = False
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class TopicCreated(BaseModel):
    topic: TopicOut
    post: Optional[PostOut] = None


class ThreadOut(BaseModel):
    topic: TopicOut
    posts: list[PostOut] = []


class ModerationQueue(BaseModel):
    topics: list[TopicOut] = []
    posts: list[PostOut] = []


# ---------------------------------------------------------------------------
# Rates & Newsletter
# ---------------------------------------------------------------------------

class RateIn(BaseModel):
    code: str
    name: str = ""
    rate: float = Field(..., ge=0)


class RateUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    rate: Optional[float] = Field(None, ge=0)


class RateOut(BaseModel):
    id: str
    code: str
    name: Optional[str] = ""
    rate: float
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class NewsletterIn(BaseModel):
    # "@" is checked by the service so the error text stays the portal's own
    email: str


class SubscriptionOut(_Flags):
    id: str
    email: str
    is_active: bool = True
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class LoginIn(BaseModel):
    email: str
    password: str


class RegisterIn(BaseModel):
    email: EmailStr
    password: str
    display_name: str = ""


class ForgotPasswordIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    token: str
    password: str


class UserOut(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = None
    role: str = "user"
    is_admin: bool = False


class SessionOut(BaseModel):
    token: str
    user: UserOut


# ---------------------------------------------------------------------------
# Home, search, tools
# ---------------------------------------------------------------------------

class HomeOut(BaseModel):
    featured_offers: list[OfferOut] = []
    rates: list[RateOut] = []
    latest_topics: list[TopicOut] = []


class SearchHit(BaseModel):
    id: str
    title: str
    type: str
    slug: Optional[str] = None


class CalculatorIn(BaseModel):
    amount: float = Field(..., gt=0)
    rate: float = Field(..., ge=0)
    term_months: int = Field(..., gt=0)


class CalculatorOut(BaseModel):
    monthly_payment: float
    total_payment: float
    overpayment: float


class RatingOut(BaseModel):
    score: int
    label: str
    description: str
    progress: float


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

class SystemStats(BaseModel):
    offers: int = 0
    articles: int = 0
    news: int = 0
    topics: int = 0
    categories: int = 0
    pending_topics: int = 0
    pending_posts: int = 0
    subscribers: int = 0


class GenerateIn(BaseModel):
    topic: str


class GeneratedArticle(BaseModel):
    title: str
    content: str


class RewriteIn(BaseModel):
    text: str


class RewriteOut(BaseModel):
    text: str


class SaveArticleIn(BaseModel):
    title: str
    content: str
    category_id: str


class UrlIn(BaseModel):
    url: str


class Headline(BaseModel):
    title: str
    url: str
    description: str = ""


class ParsedPage(BaseModel):
    title: str
    url: str
    description: str = ""
    content: str = ""


class NewsDraft(BaseModel):
    title: str
    url: Optional[str] = None
    content: str = ""


class PublishDraftIn(NewsDraft):
    category_id: Optional[str] = None
    kind: str = "article"
