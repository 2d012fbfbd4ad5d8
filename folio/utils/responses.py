from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from folio.errors import ApiError, ErrorCode


def success(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        {"success": True, "data": jsonable_encoder(data)},
        status_code=status_code,
    )


def error_response(
    code: ErrorCode | str,
    message: str,
    status_code: int,
    details: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": ErrorCode(code).value, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(
        {"success": False, "error": error},
        status_code=status_code,
        headers=headers,
    )


def api_error_response(exc: ApiError) -> JSONResponse:
    return error_response(
        exc.code, exc.message, exc.status_code, exc.details, exc.headers
    )
