"""
Translation of service errors and catalog failures into HTTP responses.
"""
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse
from app.exceptions import ConflictError, NotFoundError, StorefrontError, ValidationFailed
from app.integrations.results import Failure

_STATUS_BY_ERROR = {
    ValidationFailed: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}

def http_error(exc: StorefrontError) -> HTTPException:
    """HTTPException carrying the status that matches a domain error."""
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)

def failure_response(failure: Failure, request_id: str) -> JSONResponse:
    """Uniform error envelope for a catalog API failure."""
    headers = {"Retry-After": "30"} if failure.retryable else None
    return JSONResponse(
        status_code=failure.http_status or failure.kind.default_status,
        content={
            "success": False,
            "message": failure.message,
            "error": failure.to_dict(),
            "request_id": request_id,
        },
        headers=headers,
    )
