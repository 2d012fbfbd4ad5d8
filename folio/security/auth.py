"""Bearer-token gate for administrator routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from folio.config import settings
from folio.errors import UnauthorizedError
from folio.security.tokens import verify_token

BEARER_PREFIX = "Bearer "
PROTECTED_PREFIXES = ("/api/admin/",)
PROTECTED_PATHS = frozenset({"/api/admin", "/api/upload"})


@dataclass(frozen=True)
class AdminContext:
    subject_id: str
    username: str


def extract_bearer_token(header: str | None) -> str | None:
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def authorize(header: str | None, secret: str) -> AdminContext:
    token = extract_bearer_token(header)
    if token is None:
        raise UnauthorizedError("Missing or invalid authorization header")
    payload = verify_token(token, secret)
    if payload is None:
        raise UnauthorizedError("Invalid or expired token")
    return AdminContext(subject_id=payload.sub, username=payload.username)


def is_protected_path(path: str) -> bool:
    return path in PROTECTED_PATHS or path.startswith(PROTECTED_PREFIXES)


async def require_admin(request: Request) -> AdminContext:
    """FastAPI dependency guarding the admin and upload routes."""
    admin = authorize(request.headers.get("authorization"), settings.secret_key)
    request.state.admin = admin
    return admin
