import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.core.config import settings
from src.core.exceptions.base import AppException
from src.shared.schemas import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int, message: str, errors: list[ErrorDetail] | None = None
) -> JSONResponse:
    body = ErrorResponse(
        message=message,
        errors=errors if errors is not None else [ErrorDetail(message=message)],
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return _error_response(
        exc.status_code, exc.message, [ErrorDetail(field=exc.field, message=exc.message)]
    )


def _field_path(loc: tuple) -> str | None:
    # ("body", "line_items", 0, "quantity") -> "line_items.0.quantity"
    parts = loc[1:] if loc and loc[0] in ("body", "query", "path") else loc
    return ".".join(str(part) for part in parts) or None


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        ErrorDetail(field=_field_path(tuple(err.get("loc", ()))), message=err.get("msg", "Invalid value"))
        for err in exc.errors()
    ]
    return _error_response(422, "Validation error", errors)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = str(exc.detail) if exc.detail else "HTTP error"
    return _error_response(exc.status_code, message)


def describe_db_error(exc: SQLAlchemyError) -> tuple[int, str, str | None]:
    """Map a database error that escaped the services to (status, message, field)."""
    raw = str(getattr(exc, "orig", exc))
    lower = raw.lower()

    if "does not exist" in lower and ("column" in lower or "relation" in lower):
        return 500, "Database schema is out of date, run the migrations", None
    if "doc_number" in lower and ("unique" in lower or "duplicate" in lower):
        return 409, "Document number already issued", "doc_number"
    return 500, raw if settings.debug else "Database error", None


async def sqlalchemy_db_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    status_code, message, field = describe_db_error(exc)
    return _error_response(status_code, message, [ErrorDetail(field=field, message=message)])


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_db_error_handler)
