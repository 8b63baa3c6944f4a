# api/errors.py
from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class ApiError(Exception):
    """Rendered as `{"error": code, "details": ...}` with `status_code`."""

    def __init__(self, status_code: int, code: str, details: str | None = None) -> None:
        super().__init__(code)
        self.status_code = status_code
        self.code = code
        self.details = details


def _body(code: str, details=None) -> dict:
    body = {"error": code}
    if details is not None:
        body["details"] = details
    return body


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_body(exc.code, exc.details))

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_body("INVALID_BODY", details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return JSONResponse(
                status_code=exc.status_code,
                content=_body("Method not allowed"),
                headers=exc.headers,
            )
        return JSONResponse(status_code=exc.status_code, content=_body(str(exc.detail)))
