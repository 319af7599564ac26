"""Defines common Value Objects used across the API resilience context.

These objects represent simple values like URLs, HTTP methods and header
maps, ensuring consistency and type safety.
"""

from typing import Any, Dict, Mapping, NewType, Optional

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are plain values at runtime.
HttpMethod = NewType("HttpMethod", str)        # 'GET', 'POST', ...
RequestUrl = NewType("RequestUrl", str)        # Relative path or absolute URL
StatusCode = NewType("StatusCode", int)        # HTTP status code
ResponseBody = NewType("ResponseBody", bytes)  # Raw, undecoded response body

HeaderMap = Mapping[str, str]
JsonData = Any  # Whatever json.loads produced
QueryParams = Optional[Dict[str, Any]]

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


def normalize_headers(headers: Optional[HeaderMap]) -> Dict[str, str]:
    """Returns a copy of the headers with lower-cased names."""
    if not headers:
        return {}
    return {str(name).lower(): str(value) for name, value in headers.items()}
