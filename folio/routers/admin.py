"""Administrator endpoints. Every route requires a valid bearer token."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import settings
from folio.constants import MAX_RECORD_ID
from folio.database import get_db
from folio.schemas.blog import ArticleIn, ArticleStatus, CategoryIn, DeleteResult, TagIn
from folio.security import content_length_limit, require_admin
from folio.services.article_service import article_service
from folio.services.pagination import clamp_page
from folio.services.taxonomy_service import category_service, tag_service
from folio.utils.responses import success

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[
        Depends(require_admin),
        Depends(content_length_limit(settings.max_request_body_bytes)),
    ],
)


# ==========================================
# Articles
# ==========================================
@router.get("/articles")
async def list_articles(
    page: int | None = Query(None),
    page_size: int | None = Query(None, alias="pageSize"),
    category_id: int | None = Query(None, alias="categoryId", le=MAX_RECORD_ID),
    status: ArticleStatus | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """All articles including drafts, newest first."""
    result = await article_service.list_all(
        db,
        clamp_page(page, page_size),
        category_id=category_id,
        status=status,
    )
    return success(result)


@router.post("/article")
async def create_article(payload: ArticleIn, db: AsyncSession = Depends(get_db)):
    return success(await article_service.create(db, payload), status_code=201)


@router.get("/article/{article_id:int}")
async def get_article(
    article_id: int = Path(le=MAX_RECORD_ID), db: AsyncSession = Depends(get_db)
):
    return success(await article_service.get(db, article_id))


@router.put("/article/{article_id:int}")
async def update_article(
    *,
    article_id: int = Path(le=MAX_RECORD_ID),
    payload: ArticleIn,
    db: AsyncSession = Depends(get_db),
):
    return success(await article_service.update(db, article_id, payload))


@router.delete("/article/{article_id:int}")
async def delete_article(
    article_id: int = Path(le=MAX_RECORD_ID), db: AsyncSession = Depends(get_db)
):
    await article_service.delete(db, article_id)
    return success(DeleteResult())


@router.post("/article/{article_id:int}/pin")
async def toggle_pin(
    article_id: int = Path(le=MAX_RECORD_ID), db: AsyncSession = Depends(get_db)
):
    return success(await article_service.toggle_pin(db, article_id))


# ==========================================
# Categories
# ==========================================
@router.post("/category")
async def create_category(payload: CategoryIn, db: AsyncSession = Depends(get_db)):
    return success(await category_service.create(db, payload), status_code=201)


@router.put("/category/{category_id:int}")
async def update_category(
    *,
    category_id: int = Path(le=MAX_RECORD_ID),
    payload: CategoryIn,
    db: AsyncSession = Depends(get_db),
):
    return success(await category_service.update(db, category_id, payload))


@router.delete("/category/{category_id:int}")
async def delete_category(
    category_id: int = Path(le=MAX_RECORD_ID), db: AsyncSession = Depends(get_db)
):
    await category_service.delete(db, category_id)
    return success(DeleteResult())


# ==========================================
# Tags
# ==========================================
@router.post("/tag")
async def create_tag(payload: TagIn, db: AsyncSession = Depends(get_db)):
    return success(await tag_service.create(db, payload), status_code=201)


@router.delete("/tag/{tag_id:int}")
async def delete_tag(
    tag_id: int = Path(le=MAX_RECORD_ID), db: AsyncSession = Depends(get_db)
):
    await tag_service.delete(db, tag_id)
    return success(DeleteResult())
