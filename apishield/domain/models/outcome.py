"""Attempt Outcome: what a single request attempt produced.

Exactly one of TransportFailure, HttpResult or TimeoutOutcome holds per
attempt.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from apishield.domain.models.common import ResponseBody, StatusCode, normalize_headers


@dataclass(frozen=True)
class TransportFailure:
    """No response reached us (DNS failure, refused connection, reset...)."""
    reason: str


@dataclass(frozen=True)
class TimeoutOutcome:
    """The attempt did not complete within its timeout window."""
    timeout_s: float


@dataclass(frozen=True)
class HttpResult:
    """A completed HTTP response."""
    status_code: StatusCode
    headers: Mapping[str, str] = field(default_factory=dict)
    body: ResponseBody = ResponseBody(b"")

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", normalize_headers(self.headers))
        if isinstance(self.body, str):
            object.__setattr__(self, "body", ResponseBody(self.body.encode("utf-8")))

    def __hash__(self) -> int:
        return hash((self.status_code, tuple(sorted(self.headers.items())), self.body))

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")

    @property
    def text(self) -> str:
        """Body decoded as UTF-8; undecodable bytes are replaced."""
        return bytes(self.body).decode("utf-8", errors="replace")


AttemptOutcome = Union[TransportFailure, HttpResult, TimeoutOutcome]
