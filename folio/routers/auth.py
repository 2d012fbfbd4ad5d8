"""Administrator login."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import settings
from folio.database import get_db
from folio.schemas.auth import LoginRequest
from folio.security import content_length_limit, limiter
from folio.security.rate_limit import login_rate_key
from folio.services import auth_service
from folio.utils.responses import success

router = APIRouter(prefix="/api", tags=["auth"])


@router.post(
    "/login",
    dependencies=[Depends(content_length_limit(settings.max_request_body_bytes))],
)
@limiter.limit(settings.login_rate_limit, key_func=login_rate_key)
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Exchange administrator credentials for a 24h bearer token."""
    return success(await auth_service.login(db, payload))
