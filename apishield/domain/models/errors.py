"""Error taxonomy and the typed result of an API call.

A call resolves to either ``Success`` or exactly one ``ClassifiedError``.
Callers only ever see one of the eight kinds below and its fixed message;
status codes, details, server messages and field errors are diagnostics
for logs and developer tooling.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from apishield.domain.models.common import JsonData


class ErrorKind(str, Enum):
    """Closed set of user-presentable failure kinds."""
    NETWORK_ERROR = "NETWORK_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    TIMEOUT = "TIMEOUT"
    HTML_RESPONSE = "HTML_RESPONSE"


ERROR_MESSAGES = {
    ErrorKind.NETWORK_ERROR: "Unable to connect to the server. Please check your internet connection.",
    ErrorKind.SERVER_ERROR: "The server is experiencing issues. Please try again in a few moments.",
    ErrorKind.NOT_FOUND: "The requested information is not available.",
    ErrorKind.UNAUTHORIZED: "Your session has expired. Please log in again.",
    ErrorKind.VALIDATION_ERROR: "Please check your input and try again.",
    ErrorKind.PARSE_ERROR: "Received an unexpected response from the server.",
    ErrorKind.TIMEOUT: "The request took too long to complete. Please try again.",
    ErrorKind.HTML_RESPONSE: "The server returned an error page instead of data.",
}


@dataclass(frozen=True)
class ClassifiedError:
    """Terminal (or per-attempt) failure mapped onto the taxonomy."""
    kind: ErrorKind
    message: str
    retryable: bool
    status_code: Optional[int] = None
    detail: Optional[str] = None
    server_message: Optional[str] = None
    field_errors: Optional[Mapping[str, Tuple[str, ...]]] = field(default=None, compare=False)
    attempts: int = 1
    endpoint: Optional[str] = None

    @classmethod
    def of(
        cls,
        kind: ErrorKind,
        retryable: bool,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        server_message: Optional[str] = None,
        field_errors: Optional[Mapping[str, Tuple[str, ...]]] = None,
    ) -> "ClassifiedError":
        """Builds an error carrying the fixed message for its kind."""
        return cls(
            kind=kind,
            message=ERROR_MESSAGES[kind],
            retryable=retryable,
            status_code=status_code,
            detail=detail,
            server_message=server_message,
            field_errors=field_errors,
        )

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ApiRequestError(self)

    def describe(self) -> str:
        """Diagnostic one-liner, never shown to end users."""
        parts = [self.kind.value]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.detail:
            parts.append(f"detail={self.detail!r}")
        if self.server_message:
            parts.append(f"server_message={self.server_message!r}")
        if self.field_errors:
            parts.append(f"fields={sorted(self.field_errors)}")
        parts.append(f"retryable={self.retryable}")
        return " ".join(parts)


@dataclass(frozen=True)
class Success:
    """Validated data returned by a call."""
    data: JsonData
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> JsonData:
        return self.data


ApiResult = Union[Success, ClassifiedError]


class ApiRequestError(Exception):
    """Raised by ``ClassifiedError.unwrap()`` for exception-style callers."""

    def __init__(self, error: ClassifiedError):
        self.error = error
        super().__init__(error.message)

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind
