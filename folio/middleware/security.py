from __future__ import annotations

from collections.abc import Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_CSP = [
    "default-src 'self'",
    "base-uri 'none'",
    "frame-ancestors 'none'",
    "img-src 'self' data: https:",
    "font-src 'self'",
    "connect-src 'self'",
    "script-src 'self'",
    "style-src 'self' 'unsafe-inline'",
    "object-src 'none'",
]


def _is_secure_request(request: Request) -> bool:
    # Honor reverse proxy headers if present
    xf_proto = request.headers.get("x-forwarded-proto")
    if xf_proto:
        return "https" in xf_proto
    return request.url.scheme == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Sets hardened security headers on every response, errors and CORS
    preflights included.
    - HSTS only for HTTPS requests
    - API-oriented CSP that forbids framing
    """

    def __init__(
        self,
        app,
        *,
        csp_directives: Iterable[str] | None = None,
        hsts: str = "max-age=31536000; includeSubDomains",
        referrer_policy: str = "strict-origin-when-cross-origin",
        permissions_policy: str = "geolocation=(), microphone=(), camera=()",
        frame_options: str = "DENY",
    ) -> None:
        super().__init__(app)
        self.hsts = hsts
        self.referrer_policy = referrer_policy
        self.permissions_policy = permissions_policy
        self.frame_options = frame_options
        self.csp_value = "; ".join(csp_directives or DEFAULT_CSP)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers.setdefault("Content-Security-Policy", self.csp_value)
        if _is_secure_request(request):
            response.headers.setdefault("Strict-Transport-Security", self.hsts)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", self.frame_options)
        # Legacy, still expected by older scanners
        response.headers.setdefault("X-XSS-Protection", "1; mode=block")
        response.headers.setdefault("Referrer-Policy", self.referrer_policy)
        if self.permissions_policy:
            response.headers.setdefault("Permissions-Policy", self.permissions_policy)
        return response
