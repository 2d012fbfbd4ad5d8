"""Public article endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from folio.constants import MAX_RECORD_ID
from folio.database import get_db
from folio.services.article_service import article_service
from folio.services.pagination import clamp_page
from folio.utils.responses import success

router = APIRouter(prefix="/api", tags=["articles"])


async def _wants_unlike(request: Request) -> bool:
    # Missing, malformed or unknown actions all count as a like
    try:
        body = await request.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("action") == "unlike"


@router.get("/articles")
async def list_articles(
    page: int | None = Query(None),
    page_size: int | None = Query(None, alias="pageSize"),
    category_id: int | None = Query(None, alias="categoryId", le=MAX_RECORD_ID),
    tag_id: int | None = Query(None, alias="tagId", le=MAX_RECORD_ID),
    db: AsyncSession = Depends(get_db),
):
    """Published articles, pinned first, with category and tags embedded."""
    result = await article_service.list_published(
        db,
        clamp_page(page, page_size),
        category_id=category_id,
        tag_id=tag_id,
    )
    return success(result)


@router.get("/article/{article_id:int}")
async def get_article(
    article_id: int = Path(le=MAX_RECORD_ID), db: AsyncSession = Depends(get_db)
):
    """Single published article; every call counts as one view."""
    return success(await article_service.view(db, article_id))


@router.post("/article/{article_id:int}/like")
async def like_article(
    request: Request,
    article_id: int = Path(le=MAX_RECORD_ID),
    db: AsyncSession = Depends(get_db),
):
    """Add one like, or remove one when the body is ``{"action": "unlike"}``."""
    unlike = await _wants_unlike(request)
    result = await article_service.like(db, article_id, unlike=unlike)
    return success(result)
