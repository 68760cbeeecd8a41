"""Translation of domain errors into HTTP responses."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from subway.core.exceptions import (
    DuplicateNameError,
    DuplicateStationError,
    InvalidGraphStateError,
    InvalidSectionError,
    NotFoundError,
    StationNotFoundError,
)
from subway.core.telemetry import get_current_trace_id

logger = structlog.get_logger(__name__)

# Domain error -> HTTP status. Subclasses are matched by FastAPI through the MRO.
ERROR_STATUS_CODES: dict[type[Exception], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StationNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateNameError: status.HTTP_409_CONFLICT,
    DuplicateStationError: status.HTTP_409_CONFLICT,
    InvalidSectionError: status.HTTP_400_BAD_REQUEST,
    ValueError: status.HTTP_400_BAD_REQUEST,
}


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return the status code mapped to the error type with FastAPI's detail body."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Report a storage uniqueness violation that escaped the services as a conflict."""
    logger.warning("integrity_error", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Request conflicts with existing data."},
    )


async def graph_state_error_handler(request: Request, exc: InvalidGraphStateError) -> JSONResponse:
    """Stored sections no longer form a single path; this is a server-side fault."""
    logger.error("invalid_graph_state", path=request.url.path, error=str(exc), trace_id=get_current_trace_id())
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Line data is inconsistent."},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the domain error handlers on the application."""
    for error_type in ERROR_STATUS_CODES:
        app.add_exception_handler(error_type, domain_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(InvalidGraphStateError, graph_state_error_handler)  # type: ignore[arg-type]
