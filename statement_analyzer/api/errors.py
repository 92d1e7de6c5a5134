"""Exception handlers for the HTTP surface.

Every failure is answered with ``{"error": ..., "details": ...}`` and the
status the exception declares. A rejected PDF password answers with
``{"status": "invalid_password", "error": ...}`` so clients can tell it
apart from other failures.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from statement_analyzer.utils.exceptions import (
    InvalidPasswordError,
    SessionNotFoundError,
    StatementAnalyzerError,
    ValidationError,
)
from statement_analyzer.utils.logger import get_logger

logger = get_logger(__name__)

FAILURE_MESSAGES = {
    "/api/check-pdf": "Failed to check PDF",
    "/api/check-pdf-url": "Failed to check PDF",
    "/api/unlock-pdf": "Failed to unlock PDF",
    "/api/process-pdf": "Failed to process PDF",
    "/api/analyze-text": "Failed to analyze document",
    "/api/generate-report": "Failed to generate report",
}
DEFAULT_FAILURE_MESSAGE = "Request failed"


def failure_message(request: Request) -> str:
    return FAILURE_MESSAGES.get(request.url.path, DEFAULT_FAILURE_MESSAGE)


async def handle_invalid_password(request: Request, exc: InvalidPasswordError) -> JSONResponse:
    logger.info(f"Invalid password on {request.url.path}")
    return JSONResponse(
        status_code=exc.http_status,
        content={"status": "invalid_password", "error": str(exc)},
    )


async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning(f"Validation error on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.http_status, content={"error": str(exc)})


async def handle_session_not_found(request: Request, exc: SessionNotFoundError) -> JSONResponse:
    logger.warning(f"Session not found on {request.url.path}: {exc.session_id}")
    return JSONResponse(status_code=exc.http_status, content={"error": str(exc)})


async def handle_statement_error(request: Request, exc: StatementAnalyzerError) -> JSONResponse:
    logger.error(f"{failure_message(request)}: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": failure_message(request), "details": str(exc)},
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn FastAPI body validation errors into a single 400 message."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", []) if part != "body")
        messages.append(f"{field}: {error.get('msg', 'Invalid value')}" if field else error.get("msg", "Invalid value"))

    logger.warning(f"Validation error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": " | ".join(messages) or "Invalid request"},
    )


async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": failure_message(request), "details": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers, most specific first."""
    app.add_exception_handler(InvalidPasswordError, handle_invalid_password)
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(SessionNotFoundError, handle_session_not_found)
    app.add_exception_handler(StatementAnalyzerError, handle_statement_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_generic_error)
