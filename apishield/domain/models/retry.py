"""Retry State for a single logical call.

Created by one executor invocation, never shared, discarded on resolution.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from apishield.domain.models.errors import ClassifiedError


@dataclass
class RetryState:
    attempt: int = 1
    started_at: float = field(default_factory=time.monotonic)
    last_error: Optional[ClassifiedError] = None

    @property
    def elapsed_s(self) -> float:
        return time.monotonic() - self.started_at

    def record_failure(self, error: ClassifiedError) -> None:
        self.last_error = error

    def advance(self) -> None:
        self.attempt += 1
