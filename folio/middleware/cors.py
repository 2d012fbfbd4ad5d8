"""CORS handling for the JSON API.

Preflight ``OPTIONS`` requests are answered here with 204 and never reach a
route. Every other response gets the same CORS headers merged in, whatever
its status.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


def get_cors_headers(
    origin: str | None,
    *,
    allow_origins: Sequence[str],
    allow_methods: Sequence[str],
    allow_headers: Sequence[str],
    max_age: int | None = None,
    allow_credentials: bool = False,
) -> dict[str, str]:
    headers: dict[str, str] = {}
    if "*" in allow_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    else:
        if origin and origin in allow_origins:
            headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    headers["Access-Control-Allow-Methods"] = ", ".join(allow_methods)
    headers["Access-Control-Allow-Headers"] = ", ".join(allow_headers)
    if max_age is not None:
        headers["Access-Control-Max-Age"] = str(max_age)
    if allow_credentials:
        headers["Access-Control-Allow-Credentials"] = "true"
    return headers


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        *,
        allow_origins: Sequence[str] = ("*",),
        allow_methods: Sequence[str] = ("GET", "POST", "PUT", "DELETE", "OPTIONS"),
        allow_headers: Sequence[str] = ("Content-Type", "Authorization"),
        max_age: int | None = 86400,
        allow_credentials: bool = False,
    ) -> None:
        super().__init__(app)
        self.allow_origins = list(allow_origins)
        self.allow_methods = list(allow_methods)
        self.allow_headers = list(allow_headers)
        self.max_age = max_age
        self.allow_credentials = allow_credentials

    def headers_for(self, request: Request) -> dict[str, str]:
        return get_cors_headers(
            request.headers.get("origin"),
            allow_origins=self.allow_origins,
            allow_methods=self.allow_methods,
            allow_headers=self.allow_headers,
            max_age=self.max_age,
            allow_credentials=self.allow_credentials,
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=self.headers_for(request))

        response = await call_next(request)
        for name, value in self.headers_for(request).items():
            if name == "Vary" and "vary" in response.headers:
                response.headers["Vary"] = f"{response.headers['vary']}, {value}"
            else:
                response.headers[name] = value
        return response
