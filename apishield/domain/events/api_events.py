"""Domain Events related to API calls and resilience.

Emitted by the retrying executor for every attempt, scheduled retry and
final resolution of a call.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


# --- Specific API Events ---

@dataclass
class AttemptStarted(DomainEvent):
    """Event triggered right before an attempt is sent."""
    method: str
    url: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class AttemptFailed(DomainEvent):
    """Event triggered when a single attempt produced a classified error."""
    method: str
    url: str
    attempt_number: int
    error_kind: str
    retryable: bool
    status_code: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled after a transient failure."""
    method: str
    url: str
    attempt_number: int  # the attempt that just failed
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class CallSucceeded(DomainEvent):
    """Event triggered when a call resolves with validated data."""
    method: str
    url: str
    attempts: int
    elapsed_ms: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class CallFailed(DomainEvent):
    """Event triggered when a call resolves with a terminal classified error."""
    method: str
    url: str
    attempts: int
    error_kind: str
    elapsed_ms: float
    timestamp: float = field(default_factory=time.time)
