"""Error handling middleware."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from itinerary_pipeline.commons.telemetry.logger import get_logger
from itinerary_pipeline.domain.exceptions import (
    CheckpointCorruptedException,
    DomainException,
    ErrorCode,
    InvalidYouTubeUrlException,
    JobFailedError,
    JobNotFoundException,
)

logger = get_logger(__name__)

# Most specific first; DomainException catches the rest
_DOMAIN_ERRORS: tuple[tuple[type[DomainException], str, int], ...] = (
    (JobNotFoundException, "JOB_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (InvalidYouTubeUrlException, ErrorCode.INVALID_SOURCE_REF.value, status.HTTP_400_BAD_REQUEST),
    (CheckpointCorruptedException, ErrorCode.RESUME_STATE_MISSING.value, status.HTTP_409_CONFLICT),
    (DomainException, "DOMAIN_ERROR", status.HTTP_400_BAD_REQUEST),
)


def _error_body(request: Request, code: str, message: str, details: dict[str, Any]) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": getattr(request.state, "request_id", "unknown"),
        }
    }


def _details(exc: DomainException) -> dict[str, Any]:
    if isinstance(exc, JobFailedError):
        return dict(exc.detail or {})
    job_id = getattr(exc, "job_id", None)
    return {"job_id": job_id} if job_id else {}


def _handle_exception(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, JobFailedError):
        code, status_code = exc.code.value, status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, DomainException):
        code, status_code = next(
            (c, s) for exc_type, c, s in _DOMAIN_ERRORS if isinstance(exc, exc_type)
        )
    else:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(request, "INTERNAL_ERROR", "An unexpected error occurred", {}),
        )

    details = _details(exc)
    logger.warning(
        "Request failed",
        extra={"error_code": code, "status_code": status_code, "details": details},
    )
    return JSONResponse(
        status_code=status_code,
        content=_error_body(request, code, str(exc), details),
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Render exceptions as ``{"error": {code, message, details, request_id}}``."""
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)
