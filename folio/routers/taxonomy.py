"""Public category and tag endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from folio.constants import MAX_RECORD_ID
from folio.database import get_db
from folio.services.taxonomy_service import category_service, tag_service
from folio.utils.responses import success

router = APIRouter(prefix="/api", tags=["taxonomy"])


@router.get("/categories")
async def list_categories(db: AsyncSession = Depends(get_db)):
    return success(await category_service.list_all(db))


@router.get("/category/{category_id:int}")
async def get_category(
    category_id: int = Path(le=MAX_RECORD_ID), db: AsyncSession = Depends(get_db)
):
    return success(await category_service.get(db, category_id))


@router.get("/tags")
async def list_tags(db: AsyncSession = Depends(get_db)):
    return success(await tag_service.list_all(db))


@router.get("/tag/{tag_id:int}")
async def get_tag(
    tag_id: int = Path(le=MAX_RECORD_ID), db: AsyncSession = Depends(get_db)
):
    return success(await tag_service.get(db, tag_id))
