"""Request body ceilings.

Declared bodies are checked per route by ``content_length_limit`` once the
caller is authorized. Bodies sent without a ``Content-Length`` (chunked) are
buffered by ``ChunkedBodyLimitMiddleware`` up to the path's ceiling before
the app reads them.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping

from fastapi import Request
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from folio.config import settings
from folio.errors import BadRequestError, PayloadTooLargeError, UnauthorizedError
from folio.security.auth import authorize, is_protected_path
from folio.utils.responses import api_error_response

BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def _too_large(max_bytes: int) -> PayloadTooLargeError:
    return PayloadTooLargeError(
        f"Request body too large. Maximum size: {max_bytes} bytes"
    )


def content_length_limit(max_bytes: int) -> Callable[[Request], Awaitable[None]]:
    """Build a dependency rejecting requests whose declared body is too big."""

    async def check_content_length(request: Request) -> None:
        raw = request.headers.get("content-length")
        if raw is None:
            return
        try:
            length = int(raw)
        except ValueError:
            raise BadRequestError("Invalid Content-Length header") from None
        if length > max_bytes:
            raise _too_large(max_bytes)

    return check_content_length


class ChunkedBodyLimitMiddleware:
    """Caps request bodies that arrive without a ``Content-Length``.

    The body is read into memory until it ends or passes the ceiling for
    its path, then replayed to the app as a single message. Over the
    ceiling, unauthorized calls to admin paths still get 401 first.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        max_bytes: int,
        path_limits: Mapping[str, int] | None = None,
    ) -> None:
        self.app = app
        self.max_bytes = max_bytes
        self.path_limits = dict(path_limits or {})

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in BODY_METHODS:
            await self.app(scope, receive, send)
            return
        headers = Headers(scope=scope)
        if "content-length" in headers:
            await self.app(scope, receive, send)
            return

        max_bytes = self.path_limits.get(scope["path"], self.max_bytes)
        body = bytearray()
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body.extend(message.get("body", b""))
            more_body = message.get("more_body", False)
            if len(body) > max_bytes:
                rejection = self._rejection(scope, headers, max_bytes)
                response = api_error_response(rejection)
                await response(scope, receive, send)
                return

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if replayed:
                return await receive()
            replayed = True
            return {"type": "http.request", "body": bytes(body), "more_body": False}

        await self.app(scope, replay, send)

    @staticmethod
    def _rejection(scope: Scope, headers: Headers, max_bytes: int):
        if is_protected_path(scope["path"]):
            try:
                authorize(headers.get("authorization"), settings.secret_key)
            except UnauthorizedError as exc:
                return exc
        return _too_large(max_bytes)
