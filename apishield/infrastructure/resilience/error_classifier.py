"""Error Classifier: maps one attempt onto the error taxonomy.

Classification only looks at the current attempt (its outcome and, for
2xx responses, the validator's verdict) and is deterministic. For HTTP
results the retryable flag comes solely from the configured retryable
status set, so codes outside it are never retried. Validation failures also
carry the server's own message and field errors when the body has them;
the kind and its fixed message are unaffected.
"""

import logging
from typing import Optional

from apishield.domain.models.errors import ClassifiedError, ErrorKind
from apishield.domain.models.outcome import AttemptOutcome, HttpResult, TimeoutOutcome, TransportFailure
from apishield.domain.models.validation import Invalid, InvalidReason, ValidationVerdict
from apishield.infrastructure.resilience.response_validator import extract_error_details
from apishield.infrastructure.resilience.retry_config import RetryConfig

logger = logging.getLogger(__name__)

SERVER_ERROR_STATUSES = frozenset({500, 502, 503, 504})
UNAUTHORIZED_STATUSES = frozenset({401, 403})
VALIDATION_STATUSES = frozenset({400, 422})


class ErrorClassifier:
    """Classifies attempt outcomes against a retry configuration."""

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()

    def classify(
        self,
        outcome: AttemptOutcome,
        verdict: Optional[ValidationVerdict] = None,
    ) -> ClassifiedError:
        """Returns the classified error for one attempt.

        Args:
            outcome: What the attempt produced.
            verdict: Validator verdict, present only for 2xx responses.

        Returns:
            The ClassifiedError; the first matching rule wins.
        """
        if isinstance(outcome, TransportFailure):
            return ClassifiedError.of(ErrorKind.NETWORK_ERROR, retryable=True, detail=outcome.reason)

        if isinstance(outcome, TimeoutOutcome):
            return ClassifiedError.of(
                ErrorKind.TIMEOUT, retryable=True, detail=f"no response within {outcome.timeout_s:g}s"
            )

        if not isinstance(outcome, HttpResult):
            raise TypeError(f"Unknown attempt outcome: {outcome!r}")

        return self._classify_http(outcome, verdict)

    def _classify_http(self, result: HttpResult, verdict: Optional[ValidationVerdict]) -> ClassifiedError:
        status = result.status_code
        retryable = self.config.is_retryable_status(status)

        if status in SERVER_ERROR_STATUSES:
            return ClassifiedError.of(ErrorKind.SERVER_ERROR, retryable, status_code=status)
        if status == 408:
            return ClassifiedError.of(ErrorKind.TIMEOUT, retryable, status_code=status)
        if status == 429:
            return ClassifiedError.of(ErrorKind.SERVER_ERROR, retryable, status_code=status, detail="rate limited")
        if status == 404:
            return ClassifiedError.of(ErrorKind.NOT_FOUND, retryable, status_code=status)
        if status in UNAUTHORIZED_STATUSES:
            return ClassifiedError.of(ErrorKind.UNAUTHORIZED, retryable, status_code=status)
        if status in VALIDATION_STATUSES:
            server_message, field_errors = extract_error_details(result)
            return ClassifiedError.of(
                ErrorKind.VALIDATION_ERROR, retryable, status_code=status,
                server_message=server_message, field_errors=field_errors,
            )

        if isinstance(verdict, Invalid):
            if verdict.reason is InvalidReason.HTML_ERROR_PAGE:
                return ClassifiedError.of(
                    ErrorKind.HTML_RESPONSE, retryable, status_code=status, detail=verdict.extracted_message
                )
            return ClassifiedError.of(
                ErrorKind.PARSE_ERROR, retryable, status_code=status, detail=verdict.reason.value
            )

        logger.debug(f"Unrecognized status {status}; classifying as SERVER_ERROR")
        return ClassifiedError.of(ErrorKind.SERVER_ERROR, retryable, status_code=status)


_default_classifier = ErrorClassifier()


def classify(outcome: AttemptOutcome, verdict: Optional[ValidationVerdict] = None) -> ClassifiedError:
    """Classifies with the default configuration."""
    return _default_classifier.classify(outcome, verdict)
