"""HS256 bearer tokens for administrators.

Tokens carry ``sub`` (admin id as a string), ``username``, ``iat`` and
``exp``. Every token expires exactly :data:`TOKEN_LIFETIME_SECONDS` after it
was issued; there is no refresh.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import jwt

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
TOKEN_LIFETIME_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class TokenPayload:
    sub: str
    username: str
    iat: int
    exp: int


def issue_token(
    subject_id: int | str,
    username: str,
    secret: str,
    *,
    now: int | None = None,
) -> str:
    issued_at = int(time.time()) if now is None else int(now)
    claims = {
        "sub": str(subject_id),
        "username": username,
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME_SECONDS,
    }
    return jwt.encode(claims, secret, algorithm=TOKEN_ALGORITHM)


def verify_token(token: str, secret: str) -> TokenPayload | None:
    """Return the token's claims, or ``None`` if it is not acceptable.

    Bad signatures, malformed tokens, expired tokens and tokens whose
    claims have the wrong shape all yield ``None``.
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[TOKEN_ALGORITHM],
            options={"require": ["sub", "iat", "exp"]},
        )
    except jwt.PyJWTError as exc:
        logger.debug("Rejected token: %s", exc)
        return None

    sub = claims.get("sub")
    username = claims.get("username")
    iat = claims.get("iat")
    exp = claims.get("exp")
    if not isinstance(sub, str) or not isinstance(username, str):
        return None
    if type(iat) is not int or type(exp) is not int:
        return None
    return TokenPayload(sub=sub, username=username, iat=iat, exp=exp)
