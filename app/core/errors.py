from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error that renders as ``{"success": false, "error": {...}}``."""

    def __init__(self, *, title: str, detail: str, code: int) -> None:
        super().__init__(detail)
        self.title = title
        self.detail = detail
        self.code = code

    def __repr__(self) -> str:
        return f"ApiError(code={self.code}, title={self.title!r}, detail={self.detail!r})"

    @classmethod
    def bad_request(cls, detail: str, title: str = "Bad Request") -> ApiError:
        return cls(title=title, detail=detail, code=400)

    @classmethod
    def unauthorized(cls, detail: str, title: str = "Unauthorized") -> ApiError:
        return cls(title=title, detail=detail, code=401)

    @classmethod
    def forbidden(cls, detail: str, title: str = "Forbidden") -> ApiError:
        return cls(title=title, detail=detail, code=403)

    @classmethod
    def not_found(cls, detail: str, title: str = "Not Found") -> ApiError:
        return cls(title=title, detail=detail, code=404)

    @classmethod
    def too_many_requests(cls, detail: str, title: str = "Too Many Requests") -> ApiError:
        return cls(title=title, detail=detail, code=429)

    @classmethod
    def internal_server_error(
        cls, detail: str, title: str = "Internal Server Error"
    ) -> ApiError:
        return cls(title=title, detail=detail, code=500)


def error_body(*, title: str, detail: str, code: int, path: str) -> dict[str, object]:
    return {
        "success": False,
        "error": {"title": title, "detail": detail, "code": code},
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "path": path,
    }


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}" if loc else err.get("msg", ""))
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        log = logger.error if exc.code >= 500 else logger.warning
        log(
            "HTTP Error %s: %s (%s) %s %s",
            exc.code,
            exc.title,
            exc.detail,
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=exc.code,
            content=error_body(
                title=exc.title, detail=exc.detail, code=exc.code, path=request.url.path
            ),
            headers={"WWW-Authenticate": "Bearer"} if exc.code == 401 else None,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        detail = f"Validation failed: {_format_validation_errors(exc)}"
        logger.warning("Validation failed %s %s: %s", request.method, request.url.path, detail)
        return JSONResponse(
            status_code=400,
            content=error_body(
                title="Bad Request", detail=detail, code=400, path=request.url.path
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404 and exc.detail == "Not Found":
            title, detail = "Not Found", "Route not found"
        else:
            title, detail = "HTTP Error", str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                title=title, detail=detail, code=exc.status_code, path=request.url.path
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error %s %s", request.method, request.url.path)
        detail = "Internal server error" if settings.is_production else (
            str(exc) or "Something went wrong"
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                title="Internal Server Error",
                detail=detail,
                code=500,
                path=request.url.path,
            ),
        )
