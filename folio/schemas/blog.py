"""Pydantic schemas for articles, categories and tags."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from folio.constants import (
    ARTICLE_CONTENT_MAX,
    ARTICLE_COVER_MAX,
    ARTICLE_DESCRIPTION_MAX,
    ARTICLE_KEYWORDS_MAX,
    ARTICLE_TITLE_MAX,
    CATEGORY_DESCRIPTION_MAX,
    CATEGORY_NAME_MAX,
    CATEGORY_SLUG_MAX,
    MAX_RECORD_ID,
    SLUG_PATTERN,
    TAG_NAME_MAX,
    TAG_SLUG_MAX,
)

T = TypeVar("T")

RecordId = Annotated[int, Field(gt=0, le=MAX_RECORD_ID)]


class ArticleStatus(str, Enum):
    """Article status."""

    DRAFT = "draft"
    PUBLISHED = "published"


def _validate_slug(value: str) -> str:
    if not SLUG_PATTERN.match(value):
        raise ValueError(
            "Slug must contain only lowercase letters, numbers, and hyphens"
        )
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ==========================================
# Input
# ==========================================


class CategoryIn(BaseModel):
    """Create/update payload for a category."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=CATEGORY_NAME_MAX)
    slug: str = Field(..., min_length=1, max_length=CATEGORY_SLUG_MAX)
    description: str | None = Field(default=None, max_length=CATEGORY_DESCRIPTION_MAX)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str) -> str:
        return _validate_slug(value)

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class TagIn(BaseModel):
    """Create payload for a tag."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=TAG_NAME_MAX)
    slug: str = Field(..., min_length=1, max_length=TAG_SLUG_MAX)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str) -> str:
        return _validate_slug(value)


class ArticleIn(BaseModel):
    """Create/update payload for an article.

    Title and content are stored exactly as sent; only whitespace-only
    values are rejected. ``tag_ids`` replaces the article's whole tag set.
    """

    title: str = Field(..., max_length=ARTICLE_TITLE_MAX)
    content: str = Field(..., max_length=ARTICLE_CONTENT_MAX)
    status: ArticleStatus
    cover: str | None = Field(default=None, max_length=ARTICLE_COVER_MAX)
    category_id: RecordId | None = None
    description: str | None = Field(default=None, max_length=ARTICLE_DESCRIPTION_MAX)
    keywords: str | None = Field(default=None, max_length=ARTICLE_KEYWORDS_MAX)
    tag_ids: list[RecordId] | None = None

    @field_validator("title", "content")
    @classmethod
    def require_text(cls, value: str, info) -> str:
        if not value.strip():
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return value

    @field_validator("cover", "description", "keywords")
    @classmethod
    def normalize_optional(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


# ==========================================
# Output
# ==========================================


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: str | None = None
    created_at: datetime | None = None


class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    created_at: datetime | None = None


class ArticleOut(BaseModel):
    """Article with its category and tags embedded."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    cover: str | None = None
    category_id: int | None = None
    description: str | None = None
    keywords: str | None = None
    status: ArticleStatus
    view_count: int = 0
    like_count: int = 0
    is_pinned: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    category: CategoryOut | None = None
    tags: list[TagOut] = Field(default_factory=list)


class RelatedArticleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    cover: str | None = None
    description: str | None = None
    view_count: int = 0
    created_at: datetime | None = None


class ArticleDetailOut(ArticleOut):
    """Public article view with related reading suggestions."""

    related_articles: list[RelatedArticleOut] = Field(
        default_factory=list, serialization_alias="relatedArticles"
    )


class Page(BaseModel, Generic[T]):
    data: list[T]
    total: int
    page: int
    page_size: int = Field(serialization_alias="pageSize")


class LikeResult(BaseModel):
    liked: bool
    like_count: int


class PinResult(BaseModel):
    pinned: bool
    message: str


class DeleteResult(BaseModel):
    deleted: bool = True
