"""Article reads and writes.

Every write method flushes its statements on the caller's session and
commits once at the end, so an article and its tag set change together or
not at all. A constraint violation (unknown category or tag id, duplicate
tag id) surfaces as ``IntegrityError`` after the session is rolled back.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import case, delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from folio.constants import RELATED_ARTICLES_LIMIT
from folio.errors import NotFoundError
from folio.models.blog import Article, article_tags
from folio.schemas.blog import (
    ArticleDetailOut,
    ArticleIn,
    ArticleOut,
    ArticleStatus,
    LikeResult,
    Page,
    PinResult,
    RelatedArticleOut,
)
from folio.services.pagination import PageRequest

logger = logging.getLogger(__name__)

ARTICLE_NOT_FOUND = "Article not found"


def _with_relations(stmt):
    return stmt.options(selectinload(Article.category), selectinload(Article.tags))


def _tagged_with(tag_id: int):
    return Article.id.in_(
        select(article_tags.c.article_id).where(article_tags.c.tag_id == tag_id)
    )


class ArticleService:
    """Service for article operations."""

    async def _page(
        self,
        db: AsyncSession,
        conditions: list[Any],
        order_by: list[Any],
        paging: PageRequest,
    ) -> Page[ArticleOut]:
        total = await db.scalar(
            select(func.count()).select_from(Article).where(*conditions)
        )
        rows = await db.scalars(
            _with_relations(select(Article))
            .where(*conditions)
            .order_by(*order_by)
            .limit(paging.page_size)
            .offset(paging.offset)
        )
        return Page[ArticleOut](
            data=[ArticleOut.model_validate(row) for row in rows],
            total=total or 0,
            page=paging.page,
            page_size=paging.page_size,
        )

    async def list_published(
        self,
        db: AsyncSession,
        paging: PageRequest,
        *,
        category_id: int | None = None,
        tag_id: int | None = None,
    ) -> Page[ArticleOut]:
        """Published articles, pinned first and then newest first."""
        conditions: list[Any] = [Article.status == ArticleStatus.PUBLISHED.value]
        if category_id is not None:
            conditions.append(Article.category_id == category_id)
        if tag_id is not None:
            conditions.append(_tagged_with(tag_id))
        order_by = [
            Article.is_pinned.desc(),
            Article.created_at.desc(),
            Article.id.desc(),
        ]
        return await self._page(db, conditions, order_by, paging)

    async def list_all(
        self,
        db: AsyncSession,
        paging: PageRequest,
        *,
        category_id: int | None = None,
        status: ArticleStatus | None = None,
    ) -> Page[ArticleOut]:
        """Every article regardless of status, newest first."""
        conditions: list[Any] = []
        if category_id is not None:
            conditions.append(Article.category_id == category_id)
        if status is not None:
            conditions.append(Article.status == status.value)
        order_by = [Article.created_at.desc(), Article.id.desc()]
        return await self._page(db, conditions, order_by, paging)

    async def _get(self, db: AsyncSession, article_id: int, *, refresh: bool = False):
        stmt = _with_relations(select(Article)).where(Article.id == article_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        article = await db.scalar(stmt)
        if article is None:
            raise NotFoundError(ARTICLE_NOT_FOUND)
        return article

    async def get(self, db: AsyncSession, article_id: int) -> ArticleOut:
        return ArticleOut.model_validate(await self._get(db, article_id))

    async def view(self, db: AsyncSession, article_id: int) -> ArticleDetailOut:
        """Count a public view of a published article and return it.

        Drafts and missing ids are indistinguishable to the caller.
        """
        result = await db.execute(
            update(Article)
            .where(
                Article.id == article_id,
                Article.status == ArticleStatus.PUBLISHED.value,
            )
            .values(view_count=Article.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(ARTICLE_NOT_FOUND)
        await db.commit()

        article = await self._get(db, article_id, refresh=True)
        related = await self.related(db, article)
        detail = ArticleDetailOut.model_validate(article)
        detail.related_articles = related
        return detail

    async def related(
        self, db: AsyncSession, article: Article
    ) -> list[RelatedArticleOut]:
        """Other published articles sharing the category or any tag."""
        shared_tags = select(article_tags.c.tag_id).where(
            article_tags.c.article_id == article.id
        )
        matches = [
            Article.id.in_(
                select(article_tags.c.article_id).where(
                    article_tags.c.tag_id.in_(shared_tags)
                )
            )
        ]
        if article.category_id is not None:
            matches.append(Article.category_id == article.category_id)
        rows = await db.scalars(
            select(Article)
            .where(
                Article.id != article.id,
                Article.status == ArticleStatus.PUBLISHED.value,
                or_(*matches),
            )
            .order_by(Article.view_count.desc(), Article.created_at.desc())
            .limit(RELATED_ARTICLES_LIMIT)
        )
        return [RelatedArticleOut.model_validate(row) for row in rows]

    async def _replace_tags(
        self, db: AsyncSession, article_id: int, tag_ids: list[int] | None
    ) -> None:
        await db.execute(
            delete(article_tags).where(article_tags.c.article_id == article_id)
        )
        if tag_ids:
            await db.execute(
                insert(article_tags),
                [{"article_id": article_id, "tag_id": tag_id} for tag_id in tag_ids],
            )

    async def _commit(self, db: AsyncSession) -> None:
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise

    @staticmethod
    def _fields(payload: ArticleIn) -> dict[str, Any]:
        data = payload.model_dump(exclude={"tag_ids"})
        data["status"] = payload.status.value
        return data

    async def create(self, db: AsyncSession, payload: ArticleIn) -> ArticleOut:
        article = Article(**self._fields(payload))
        db.add(article)
        try:
            await db.flush()
            await self._replace_tags(db, article.id, payload.tag_ids)
        except IntegrityError:
            await db.rollback()
            raise
        await self._commit(db)
        logger.info("Created article %s (%s)", article.id, article.status)
        return ArticleOut.model_validate(await self._get(db, article.id, refresh=True))

    async def update(
        self, db: AsyncSession, article_id: int, payload: ArticleIn
    ) -> ArticleOut:
        """Replace every mutable field and the whole tag set."""
        article = await self._get(db, article_id)
        for field, value in self._fields(payload).items():
            setattr(article, field, value)
        # Touch updated_at even when no other column changed
        article.updated_at = func.now()
        try:
            await db.flush()
            await self._replace_tags(db, article_id, payload.tag_ids)
        except IntegrityError:
            await db.rollback()
            raise
        await self._commit(db)
        logger.info("Updated article %s", article_id)
        return ArticleOut.model_validate(await self._get(db, article_id, refresh=True))

    async def delete(self, db: AsyncSession, article_id: int) -> None:
        result = await db.execute(
            delete(Article)
            .where(Article.id == article_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(ARTICLE_NOT_FOUND)
        await db.commit()
        logger.info("Deleted article %s", article_id)

    async def like(
        self, db: AsyncSession, article_id: int, *, unlike: bool = False
    ) -> LikeResult:
        """Adjust ``like_count`` by one in a single statement, never below 0."""
        if unlike:
            new_count = case(
                (Article.like_count > 0, Article.like_count - 1), else_=0
            )
        else:
            new_count = Article.like_count + 1
        result = await db.execute(
            update(Article)
            .where(
                Article.id == article_id,
                Article.status == ArticleStatus.PUBLISHED.value,
            )
            .values(like_count=new_count)
            .execution_options(synchronize_session=False)
            .returning(Article.like_count)
        )
        like_count = result.scalar_one_or_none()
        if like_count is None:
            raise NotFoundError(ARTICLE_NOT_FOUND)
        await db.commit()
        return LikeResult(liked=not unlike, like_count=like_count)

    async def toggle_pin(self, db: AsyncSession, article_id: int) -> PinResult:
        result = await db.execute(
            update(Article)
            .where(Article.id == article_id)
            .values(is_pinned=~Article.is_pinned)
            .execution_options(synchronize_session=False)
            .returning(Article.is_pinned)
        )
        pinned = result.scalar_one_or_none()
        if pinned is None:
            raise NotFoundError(ARTICLE_NOT_FOUND)
        await db.commit()
        logger.info("Article %s pinned=%s", article_id, pinned)
        message = "Article pinned" if pinned else "Article unpinned"
        return PinResult(pinned=bool(pinned), message=message)


# Singleton instance
article_service = ArticleService()
