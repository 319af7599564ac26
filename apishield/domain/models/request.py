"""Request Descriptor: the immutable description of one logical API call.

The same descriptor is reused, untouched, for every retry of a call.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from apishield.domain.models.common import (
    ALLOWED_METHODS,
    HttpMethod,
    QueryParams,
    RequestUrl,
    normalize_headers,
)


class CredentialMode(str, Enum):
    """Whether credentials (auth header, cookies) travel with a request."""
    OMIT = "omit"
    SAME_ORIGIN = "same-origin"
    INCLUDE = "include"


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the transport needs to issue one attempt."""
    method: HttpMethod
    url: RequestUrl
    body: Optional[Any] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    credentials: CredentialMode = CredentialMode.SAME_ORIGIN
    expect_json: bool = True
    params: QueryParams = None

    def __post_init__(self) -> None:
        method = str(self.method).upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method!r}")
        if not self.url:
            raise ValueError("Request URL must not be empty")
        # frozen: go through object.__setattr__ to store normalised values
        object.__setattr__(self, "method", HttpMethod(method))
        object.__setattr__(self, "headers", MappingProxyType(normalize_headers(self.headers)))
        object.__setattr__(self, "credentials", CredentialMode(self.credentials))

    def describe(self) -> str:
        """Short 'METHOD url' label used in log lines."""
        return f"{self.method} {self.url}"
