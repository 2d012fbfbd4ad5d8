"""Security façade for tokens, the admin gate, rate limiting and headers."""

from folio.middleware.security import SecurityHeadersMiddleware  # noqa: F401

from .auth import (  # noqa: F401
    AdminContext,
    authorize,
    extract_bearer_token,
    is_protected_path,
    require_admin,
)
from .body_size import ChunkedBodyLimitMiddleware, content_length_limit  # noqa: F401
from .rate_limit import limiter  # noqa: F401
from .tokens import TOKEN_LIFETIME_SECONDS, issue_token, verify_token  # noqa: F401
from .utils import generate_secure_token  # noqa: F401

__all__ = [
    "AdminContext",
    "authorize",
    "extract_bearer_token",
    "is_protected_path",
    "require_admin",
    "ChunkedBodyLimitMiddleware",
    "content_length_limit",
    "limiter",
    "TOKEN_LIFETIME_SECONDS",
    "issue_token",
    "verify_token",
    "generate_secure_token",
    "SecurityHeadersMiddleware",
]
