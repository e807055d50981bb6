"""Translate storefront and Protean errors into JSON responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from storefront.shared.errors import ConcurrencyConflict, StorefrontError

logger = structlog.get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "detail": exc.message},
        )

    @app.exception_handler(ConcurrencyConflict)
    async def concurrency_conflict_handler(request: Request, exc: ConcurrencyConflict) -> JSONResponse:
        logger.error("Request failed after retries", path=request.url.path, operation=exc.operation)
        return JSONResponse(
            status_code=409,
            content={"code": "CONCURRENCY_CONFLICT", "detail": str(exc)},
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"code": "VALIDATION_ERROR", "detail": exc.messages},
        )

    @app.exception_handler(InvalidOperationError)
    async def invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"code": "INVALID_OPERATION", "detail": str(exc)},
        )

    @app.exception_handler(ObjectNotFoundError)
    async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"code": "NOT_FOUND", "detail": str(exc)},
        )
