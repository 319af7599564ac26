"""Response Validator: decides whether a completed response is usable data.

Catches disguised failures: HTML error pages served with status 200,
non-JSON content types, and bodies that do not parse. Pure inspection,
no side effects. HTML detection and message extraction are best-effort
regex heuristics, not a parser.
"""

import json
import logging
import re
from typing import Dict, Optional, Tuple

from apishield.domain.models.outcome import HttpResult
from apishield.domain.models.validation import Invalid, InvalidReason, Valid, ValidationVerdict

logger = logging.getLogger(__name__)

_HTML_TAG_RE = re.compile(r"<html(?:\s[^>]*)?>", re.IGNORECASE)
_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_H1_RE = re.compile(r"<h1[^>]*>([^<]+)</h1>", re.IGNORECASE)

JSON_MEDIA_TYPE = "application/json"


def is_html_document(text: str) -> bool:
    return bool(_HTML_TAG_RE.search(text))


def extract_html_message(text: str) -> Optional[str]:
    """Pulls a human-readable message out of an HTML error page.

    The first <title> wins; otherwise the first <h1>; otherwise None.
    """
    for pattern in (_TITLE_RE, _H1_RE):
        match = pattern.search(text)
        if match:
            message = match.group(1).strip()
            if message:
                return message
    return None


def is_json_media_type(content_type: Optional[str]) -> bool:
    """True for application/json and structured-syntax '+json' types."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_MEDIA_TYPE or media_type.endswith("+json")


def extract_error_details(
    response: HttpResult,
) -> Tuple[Optional[str], Optional[Dict[str, Tuple[str, ...]]]]:
    """Best-effort read of ``{"message": ..., "errors": {field: [...]}}`` from an error body.

    Returns (server_message, field_errors); either is None when absent or
    malformed. Never raises.
    """
    if not response.body:
        return None, None
    try:
        payload = json.loads(response.text)
    except ValueError:
        logger.debug(f"Error body of status {response.status_code} is not JSON")
        return None, None
    if not isinstance(payload, dict):
        return None, None

    message = payload.get("message")
    server_message = None
    if isinstance(message, str) and message.strip():
        server_message = message.strip()

    field_errors = None
    errors = payload.get("errors")
    if isinstance(errors, dict) and errors:
        field_errors = {}
        for name, messages in errors.items():
            if isinstance(messages, (list, tuple)):
                field_errors[str(name)] = tuple(str(m) for m in messages)
            else:
                field_errors[str(name)] = (str(messages),)
    return server_message, field_errors


def validate(response: HttpResult, expect_json: bool = True) -> ValidationVerdict:
    """Inspects a completed response and returns a verdict on its body.

    Args:
        response: The HTTP result to inspect (normally a 2xx).
        expect_json: Whether the caller expects structured JSON data.

    Returns:
        Valid(parsed data) or Invalid(reason, extracted message).
    """
    text = response.text

    # An HTML page is never data, whatever the status or declared type says
    if is_html_document(text):
        extracted = extract_html_message(text)
        logger.debug(f"HTML document detected in response body (status={response.status_code}, message={extracted!r})")
        return Invalid(InvalidReason.HTML_ERROR_PAGE, extracted)

    if not expect_json:
        return Valid(text)

    if response.status_code == 204:
        return Valid(None)

    if not is_json_media_type(response.content_type):
        logger.debug(f"Unexpected content-type {response.content_type!r}; body not parsed")
        return Invalid(InvalidReason.WRONG_CONTENT_TYPE)

    try:
        return Valid(json.loads(text))
    except ValueError as e:
        logger.debug(f"Failed to parse JSON body: {e}")
        return Invalid(InvalidReason.UNPARSABLE_BODY)
