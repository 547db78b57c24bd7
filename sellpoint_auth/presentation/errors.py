import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from sellpoint_auth.domain.errors import (
    AccessDenied,
    DomainError,
    InvalidOperation,
    NotFound,
    OperationFailed,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidOperation, status.HTTP_400_BAD_REQUEST),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (OperationFailed, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def register_exception_handlers(app: FastAPI) -> None:
    """Map the domain error taxonomy onto HTTP status codes."""

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        status_code = status_for(exc)
        log_fn = logger.error if status_code >= 500 else logger.warning
        log_fn(
            "request rejected",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": status_code,
                "error": type(exc).__name__,
            },
        )
        detail = exc.message if status_code < 500 else "operation failed"
        return JSONResponse(status_code=status_code, content={"detail": detail})
