"""Tagged outcome of every catalog API call.

Callers branch on ``isinstance(result, Success)``; no transport exception is
ever raised past the client.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Union


class ErrorKind(str, enum.Enum):
    MISSING_CREDENTIALS = "MissingCredentials"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    BAD_REQUEST = "BadRequest"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    TOO_MANY_REQUESTS = "TooManyRequests"
    SERVER_ERROR = "ServerError"
    NETWORK_ERROR = "NetworkError"
    TIMEOUT_ERROR = "TimeoutError"
    INVALID_RESPONSE = "InvalidResponse"
    UNKNOWN_ERROR = "UnknownError"

    @property
    def category(self) -> str:
        """Error taxonomy bucket exposed to API consumers."""
        return _CATEGORY_BY_KIND[self]

    @property
    def retryable(self) -> bool:
        return _CATEGORY_BY_KIND[self] == "RemoteUnavailable"

    @property
    def default_status(self) -> int:
        return _DEFAULT_STATUS[self]


_CATEGORY_BY_KIND: dict[ErrorKind, str] = {
    ErrorKind.MISSING_CREDENTIALS: "MissingCredentials",
    ErrorKind.SERVICE_UNAVAILABLE: "RemoteUnavailable",
    ErrorKind.NETWORK_ERROR: "RemoteUnavailable",
    ErrorKind.TIMEOUT_ERROR: "RemoteUnavailable",
    ErrorKind.BAD_REQUEST: "RemoteRejected",
    ErrorKind.UNAUTHORIZED: "RemoteRejected",
    ErrorKind.FORBIDDEN: "RemoteRejected",
    ErrorKind.TOO_MANY_REQUESTS: "RemoteRejected",
    ErrorKind.SERVER_ERROR: "RemoteServerError",
    ErrorKind.INVALID_RESPONSE: "RemoteServerError",
    ErrorKind.UNKNOWN_ERROR: "RemoteServerError",
}

_DEFAULT_STATUS: dict[ErrorKind, int] = {
    ErrorKind.MISSING_CREDENTIALS: 500,
    ErrorKind.SERVICE_UNAVAILABLE: 503,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.TOO_MANY_REQUESTS: 429,
    ErrorKind.SERVER_ERROR: 500,
    ErrorKind.NETWORK_ERROR: 503,
    ErrorKind.TIMEOUT_ERROR: 504,
    ErrorKind.INVALID_RESPONSE: 502,
    ErrorKind.UNKNOWN_ERROR: 500,
}

# Error codes the remote API embeds in its Errors array.
_KIND_BY_REMOTE_CODE: dict[str, ErrorKind] = {
    "TooManyRequests": ErrorKind.TOO_MANY_REQUESTS,
    "RequestThrottled": ErrorKind.TOO_MANY_REQUESTS,
    "InvalidSignature": ErrorKind.UNAUTHORIZED,
    "UnrecognizedClient": ErrorKind.UNAUTHORIZED,
    "IncompleteSignature": ErrorKind.UNAUTHORIZED,
    "InvalidAssociate": ErrorKind.FORBIDDEN,
    "AccessDenied": ErrorKind.FORBIDDEN,
    "AccessDeniedAwsUsers": ErrorKind.FORBIDDEN,
    "InternalFailure": ErrorKind.SERVER_ERROR,
    "ServiceUnavailable": ErrorKind.SERVICE_UNAVAILABLE,
}


def kind_for_status(status: int) -> ErrorKind:
    """Classify a non-success HTTP status."""
    if status == 400:
        return ErrorKind.BAD_REQUEST
    if status == 401:
        return ErrorKind.UNAUTHORIZED
    if status == 403:
        return ErrorKind.FORBIDDEN
    if status == 429:
        return ErrorKind.TOO_MANY_REQUESTS
    if status == 503:
        return ErrorKind.SERVICE_UNAVAILABLE
    if status >= 500:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.INVALID_RESPONSE


def kind_for_remote_code(code: str | None) -> ErrorKind:
    return _KIND_BY_REMOTE_CODE.get(code or "", ErrorKind.BAD_REQUEST)


@dataclass(frozen=True)
class Success:
    payload: dict[str, Any]


@dataclass(frozen=True)
class Failure:
    message: str
    code: str
    http_status: int
    kind: ErrorKind
    detail: dict[str, Any] | None = field(default=None, compare=False)

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "kind": self.kind.value,
            "category": self.kind.category,
            "retryable": self.retryable,
            "status": self.http_status,
            "detail": self.detail,
        }


RemoteResult = Union[Success, Failure]

__all__ = [
    "ErrorKind",
    "Success",
    "Failure",
    "RemoteResult",
    "kind_for_status",
    "kind_for_remote_code",
]
