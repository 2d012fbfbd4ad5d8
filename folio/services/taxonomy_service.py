"""Categories and tags."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from folio.errors import ConflictError, NotFoundError
from folio.models.blog import Article, Category, Tag
from folio.schemas.blog import CategoryIn, CategoryOut, TagIn, TagOut

logger = logging.getLogger(__name__)


async def _commit_or_conflict(db: AsyncSession, message: str) -> None:
    # The unique index backs the slug pre-check when two writers race
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(message) from None


class CategoryService:
    SLUG_TAKEN = "Category with this slug already exists"

    async def list_all(self, db: AsyncSession) -> list[CategoryOut]:
        rows = await db.scalars(
            select(Category).order_by(Category.created_at.desc(), Category.id.desc())
        )
        return [CategoryOut.model_validate(row) for row in rows]

    async def _get(self, db: AsyncSession, category_id: int) -> Category:
        category = await db.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def get(self, db: AsyncSession, category_id: int) -> CategoryOut:
        return CategoryOut.model_validate(await self._get(db, category_id))

    async def _ensure_slug_free(
        self, db: AsyncSession, slug: str, exclude_id: int | None = None
    ) -> None:
        stmt = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        if await db.scalar(stmt) is not None:
            raise ConflictError(self.SLUG_TAKEN)

    async def create(self, db: AsyncSession, payload: CategoryIn) -> CategoryOut:
        await self._ensure_slug_free(db, payload.slug)
        category = Category(**payload.model_dump())
        db.add(category)
        await _commit_or_conflict(db, self.SLUG_TAKEN)
        await db.refresh(category)
        logger.info("Created category %s (%s)", category.id, category.slug)
        return CategoryOut.model_validate(category)

    async def update(
        self, db: AsyncSession, category_id: int, payload: CategoryIn
    ) -> CategoryOut:
        category = await self._get(db, category_id)
        await self._ensure_slug_free(db, payload.slug, exclude_id=category_id)
        for field, value in payload.model_dump().items():
            setattr(category, field, value)
        await _commit_or_conflict(db, self.SLUG_TAKEN)
        logger.info("Updated category %s", category_id)
        return CategoryOut.model_validate(category)

    async def delete(self, db: AsyncSession, category_id: int) -> None:
        """Delete a category nobody references.

        Raises ``ConflictError`` carrying the number of articles still
        filed under it; the row is left untouched in that case.
        """
        category = await self._get(db, category_id)
        in_use = await db.scalar(
            select(func.count())
            .select_from(Article)
            .where(Article.category_id == category_id)
        )
        if in_use:
            raise ConflictError(
                f"Cannot delete category: {in_use} article(s) are using this category"
            )
        await db.delete(category)
        await db.commit()
        logger.info("Deleted category %s", category_id)


class TagService:
    SLUG_TAKEN = "Tag with this slug already exists"

    async def list_all(self, db: AsyncSession) -> list[TagOut]:
        rows = await db.scalars(
            select(Tag).order_by(Tag.created_at.desc(), Tag.id.desc())
        )
        return [TagOut.model_validate(row) for row in rows]

    async def get(self, db: AsyncSession, tag_id: int) -> TagOut:
        tag = await db.get(Tag, tag_id)
        if tag is None:
            raise NotFoundError("Tag not found")
        return TagOut.model_validate(tag)

    async def create(self, db: AsyncSession, payload: TagIn) -> TagOut:
        taken = await db.scalar(select(Tag.id).where(Tag.slug == payload.slug))
        if taken is not None:
            raise ConflictError(self.SLUG_TAKEN)
        tag = Tag(**payload.model_dump())
        db.add(tag)
        await _commit_or_conflict(db, self.SLUG_TAKEN)
        await db.refresh(tag)
        logger.info("Created tag %s (%s)", tag.id, tag.slug)
        return TagOut.model_validate(tag)

    async def delete(self, db: AsyncSession, tag_id: int) -> None:
        # article_tags rows go with it through ON DELETE CASCADE
        result = await db.execute(
            delete(Tag)
            .where(Tag.id == tag_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("Tag not found")
        await db.commit()
        logger.info("Deleted tag %s", tag_id)


category_service = CategoryService()
tag_service = TagService()
