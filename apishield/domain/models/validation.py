"""Validation Verdict: whether a response body is usable data."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from apishield.domain.models.common import JsonData


class InvalidReason(str, Enum):
    WRONG_CONTENT_TYPE = "wrong-content-type"
    UNPARSABLE_BODY = "unparsable-body"
    HTML_ERROR_PAGE = "html-error-page"


@dataclass(frozen=True)
class Valid:
    data: JsonData


@dataclass(frozen=True)
class Invalid:
    reason: InvalidReason
    # Pulled from <title>/<h1> of an HTML body; diagnostics only.
    extracted_message: Optional[str] = None


ValidationVerdict = Union[Valid, Invalid]
