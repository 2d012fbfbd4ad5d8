from __future__ import annotations

import math
import time

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request

from folio.config import settings


def client_ip(request: Request) -> str:
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip and cf_ip.strip():
        return cf_ip.strip()
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def login_rate_key(request: Request) -> str:
    return f"login:{client_ip(request)}"


limiter = Limiter(
    key_func=client_ip,
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
    headers_enabled=False,
)


def retry_after_seconds(request: Request, exc: RateLimitExceeded) -> int:
    """Seconds until the exhausted window resets, never less than one."""
    view_limit = getattr(request.state, "view_rate_limit", None)
    if not view_limit:
        return max(1, int(exc.limit.limit.get_expiry()))
    item, args = view_limit
    reset_at, _ = limiter.limiter.get_window_stats(item, *args)
    return max(1, math.ceil(reset_at - time.time()))
