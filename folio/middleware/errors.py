from __future__ import annotations

import logging
from collections.abc import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from folio.errors import InternalError
from folio.utils.responses import api_error_response

logger = logging.getLogger(__name__)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Turns uncaught exceptions into the standard 500 error body.

    Registered innermost so the response still passes through the CORS,
    metrics and security header middleware on its way out.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s", request.url.path)
            return api_error_response(InternalError())
