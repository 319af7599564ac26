"""Retry configuration and backoff computation.

``RetryConfig`` is built once (from settings or explicitly in tests) and
passed into the executor; it is read-only afterwards.
"""

from dataclasses import dataclass, field
from typing import FrozenSet

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_S = 1.0
DEFAULT_MAX_DELAY_S = 10.0
DEFAULT_REQUEST_TIMEOUT_S = 10.0
DEFAULT_RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({500, 502, 503, 504, 408, 429})


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behaviour.

    ``max_retries`` counts total attempts: 3 means the first attempt plus
    up to two retries.
    """
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_s: float = DEFAULT_BASE_DELAY_S
    max_delay_s: float = DEFAULT_MAX_DELAY_S
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S
    retryable_status_codes: FrozenSet[int] = field(default=DEFAULT_RETRYABLE_STATUS_CODES)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.base_delay_s <= 0:
            raise ValueError("base_delay_s must be > 0")
        if self.max_delay_s < self.base_delay_s:
            raise ValueError("max_delay_s must be >= base_delay_s")
        if self.request_timeout_s <= 0:
            raise ValueError("request_timeout_s must be > 0")
        object.__setattr__(self, "retryable_status_codes", frozenset(self.retryable_status_codes))

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retryable_status_codes

    def delay_for(self, attempt: int) -> float:
        return compute_backoff_delay(attempt, self.base_delay_s, self.max_delay_s)


def compute_backoff_delay(
    attempt: int,
    base_delay_s: float = DEFAULT_BASE_DELAY_S,
    max_delay_s: float = DEFAULT_MAX_DELAY_S,
) -> float:
    """Delay to wait after the given (1-based) failed attempt.

    min(base * 2^(attempt-1), max): 1, 2, 4, 8, 10, 10, ... seconds with
    the defaults.
    """
    if attempt < 1:
        raise ValueError("attempt is 1-based")
    # Cap the exponent so huge attempt numbers don't build huge floats
    exponent = min(attempt - 1, 62)
    return min(base_delay_s * (2 ** exponent), max_delay_s)
