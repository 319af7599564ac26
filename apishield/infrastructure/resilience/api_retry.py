"""Service for executing API requests with automatic retries.

Orchestrates the attempts of one logical call: sends the request through
the transport, validates 2xx bodies, classifies failures, and retries the
transient ones with exponential backoff. A call always resolves to either
``Success`` or exactly one ``ClassifiedError`` (the last attempt's, stamped
with the attempt count and the endpoint).
"""

import asyncio
import dataclasses
import logging
from typing import Awaitable, Callable, Optional

from apishield.domain.events.api_events import (
    AttemptFailed,
    AttemptStarted,
    CallFailed,
    CallSucceeded,
    DomainEvent,
    RetryScheduled,
)
from apishield.domain.interfaces.transport import Transport
from apishield.domain.models.errors import ApiResult, ClassifiedError, Success
from apishield.domain.models.outcome import AttemptOutcome, HttpResult, TimeoutOutcome, TransportFailure
from apishield.domain.models.request import RequestDescriptor
from apishield.domain.models.retry import RetryState
from apishield.domain.models.validation import Valid
from apishield.infrastructure.monitoring.logger_setup import log_api
from apishield.infrastructure.resilience.error_classifier import ErrorClassifier
from apishield.infrastructure.resilience.response_validator import validate
from apishield.infrastructure.resilience.retry_config import RetryConfig

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]
EventListener = Callable[[DomainEvent], None]


class RetryingRequestExecutor:
    """Runs request descriptors to resolution with retries and backoff."""

    def __init__(
        self,
        transport: Transport,
        config: Optional[RetryConfig] = None,
        classifier: Optional[ErrorClassifier] = None,
        sleep: SleepFunc = asyncio.sleep,
        event_listener: Optional[EventListener] = None,
    ):
        """Initializes the executor.

        Args:
            transport: Sends single attempts.
            config: Retry configuration (defaults apply when omitted).
            classifier: Error classifier; built from ``config`` when omitted.
            sleep: Coroutine used for backoff waits; injectable for tests.
            event_listener: Optional callback receiving domain events.
        """
        self.transport = transport
        self.config = config or RetryConfig()
        self.classifier = classifier or ErrorClassifier(self.config)
        self._sleep = sleep
        self._event_listener = event_listener

        logger.info(
            f"RetryingRequestExecutor initialized: max_retries={self.config.max_retries}, "
            f"base_delay={self.config.base_delay_s}s, max_delay={self.config.max_delay_s}s, "
            f"timeout={self.config.request_timeout_s}s"
        )
        logger.debug(f"Retryable status codes: {sorted(self.config.retryable_status_codes)}")

    def _dispatch(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self._event_listener is None:
            return
        try:
            self._event_listener(event)
        except Exception as e:
            logger.error(f"Event listener failed for {type(event).__name__}: {e}", exc_info=True)

    async def _send(self, descriptor: RequestDescriptor) -> AttemptOutcome:
        """Sends one attempt, bounded by a fresh timeout window."""
        timeout_s = self.config.request_timeout_s
        # Python 3.12+: wait_for runs the send in this task and cannot drop a racing cancel
        try:
            return await asyncio.wait_for(self.transport.send(descriptor, timeout_s), timeout=timeout_s)
        except asyncio.TimeoutError:
            return TimeoutOutcome(timeout_s)
        except Exception as e:
            # Transports should report failures as outcomes; anything else is treated as "no response"
            logger.error(f"Transport raised unexpectedly for {descriptor.describe()}: {e}", exc_info=True)
            return TransportFailure(f"{type(e).__name__}: {e}")

    async def execute(self, descriptor: RequestDescriptor, max_retries: Optional[int] = None) -> ApiResult:
        """Executes a request until it succeeds or fails terminally.

        Args:
            descriptor: The request; reused unchanged for every attempt.
            max_retries: Total attempt budget override (defaults to config).

        Returns:
            Success with the parsed data, or the last attempt's ClassifiedError.

        Raises:
            ValueError: If ``max_retries`` is below 1.
            asyncio.CancelledError: If the calling task is cancelled; no
                result is produced after cancellation.
        """
        limit = self.config.max_retries if max_retries is None else max_retries
        if limit < 1:
            raise ValueError("max_retries must be >= 1")

        state = RetryState()
        label = descriptor.describe()
        method, url = str(descriptor.method), str(descriptor.url)

        try:
            while True:
                log_api(f"Attempt {state.attempt}/{limit}: {label}")
                self._dispatch(AttemptStarted(method=method, url=url, attempt_number=state.attempt))

                outcome = await self._send(descriptor)

                verdict = None
                if isinstance(outcome, HttpResult) and outcome.is_success:
                    verdict = validate(outcome, expect_json=descriptor.expect_json)
                    if isinstance(verdict, Valid):
                        log_api(f"Attempt {state.attempt} succeeded: {label} (status={outcome.status_code})")
                        self._dispatch(CallSucceeded(
                            method=method, url=url, attempts=state.attempt, elapsed_ms=state.elapsed_s * 1000
                        ))
                        return Success(data=verdict.data, attempts=state.attempt)

                error = self.classifier.classify(outcome, verdict)
                state.record_failure(error)
                log_api(f"Attempt {state.attempt} failed: {label} -> {error.describe()}", logging.WARNING)
                self._dispatch(AttemptFailed(
                    method=method, url=url, attempt_number=state.attempt,
                    error_kind=error.kind.value, retryable=error.retryable, status_code=error.status_code,
                ))

                if error.retryable and state.attempt < limit:
                    delay = self.config.delay_for(state.attempt)
                    log_api(f"Retrying {label} in {delay:.2f}s (next attempt {state.attempt + 1}/{limit})")
                    self._dispatch(RetryScheduled(
                        method=method, url=url, attempt_number=state.attempt, delay_seconds=delay
                    ))
                    await self._sleep(delay)
                    state.advance()
                    continue

                return self._fail(state, error, label, method, url, limit)
        except asyncio.CancelledError:
            log_api(f"Call cancelled during attempt {state.attempt}: {label}", logging.WARNING)
            raise

    def _fail(
        self, state: RetryState, error: ClassifiedError, label: str, method: str, url: str, limit: int
    ) -> ClassifiedError:
        if error.retryable:
            logger.error(f"Max retries ({limit}) reached for {label}. Last error: {error.describe()}")
        else:
            logger.warning(f"Non-retryable error for {label} on attempt {state.attempt}: {error.describe()}")
        self._dispatch(CallFailed(
            method=method, url=url, attempts=state.attempt,
            error_kind=error.kind.value, elapsed_ms=state.elapsed_s * 1000,
        ))
        return dataclasses.replace(error, attempts=state.attempt, endpoint=url)
