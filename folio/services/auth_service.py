"""Administrator login and bootstrap."""

from __future__ import annotations

import logging
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import settings
from folio.errors import UnauthorizedError
from folio.models.admin import Admin
from folio.observability.metrics import LOGIN_ATTEMPTS
from folio.schemas.auth import LoginRequest, LoginResponse
from folio.security.passwords import DUMMY_PASSWORD_HASH, hash_password, verify_password
from folio.security.tokens import TOKEN_LIFETIME_SECONDS, issue_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


async def login(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    """Exchange credentials for a bearer token.

    Unknown usernames still pay for one hash verification, and both failure
    modes share one message.
    """
    admin = await db.scalar(select(Admin).where(Admin.username == payload.username))
    password_hash = admin.password_hash if admin else DUMMY_PASSWORD_HASH
    password_ok = verify_password(payload.password, password_hash)
    if admin is None or not password_ok:
        LOGIN_ATTEMPTS.labels("failure").inc()
        logger.warning("Failed login for username %r", payload.username)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    issued_at = int(time.time())
    token = issue_token(admin.id, admin.username, settings.secret_key, now=issued_at)
    expires_at = issued_at + TOKEN_LIFETIME_SECONDS
    LOGIN_ATTEMPTS.labels("success").inc()
    logger.info("Admin %s logged in", admin.username)
    return LoginResponse(token=token, expires_at=expires_at)


async def ensure_admin(
    db: AsyncSession, username: str, password: str | None
) -> Admin | None:
    """Create the bootstrap administrator if it does not exist yet."""
    if not password:
        return None
    existing = await db.scalar(select(Admin).where(Admin.username == username))
    if existing is not None:
        logger.info("Admin user %r exists", username)
        return existing
    admin = Admin(username=username, password_hash=hash_password(password))
    db.add(admin)
    await db.commit()
    logger.info("Created admin user %r", username)
    return admin
