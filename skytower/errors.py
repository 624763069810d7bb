# Error taxonomy shared by the gate, the lifecycle manager and the leaf endpoints,
# plus the FastAPI handlers that turn them into {"detail": ...} responses.
from __future__ import annotations

import logging
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("skytower.errors")


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


# Uniqueness violations keep the 400 the web client already handles
class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(AppError):
    """Identity provider, payment gateway or storage failure. Detail is logged, never returned."""

    def __init__(self, detail: str, public_detail: str = "Internal server error") -> None:
        super().__init__(detail)
        self.public_detail = public_detail


def _field_names(exc: RequestValidationError) -> List[str]:
    names: List[str] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header")]
        name = ".".join(loc) or "body"
        if name not in names:
            names.append(name)
    return names


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(UpstreamError)
    async def _upstream(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("upstream.failure", extra={"path": request.url.path, "error": exc.detail})
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_detail})

    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = _field_names(exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": f"Missing or invalid fields: {', '.join(fields)}", "fields": fields},
        )

    @app.exception_handler(SQLAlchemyError)
    async def _storage(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("storage.failure", extra={"path": request.url.path}, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
