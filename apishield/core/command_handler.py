"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the ApiService or the resilience components, presenting results
through the UserInterface.
"""

import logging
from typing import Any, Mapping, Optional

from apishield.core.services.api_service import ApiService
from apishield.domain.interfaces.user_interface import UserInterface
from apishield.domain.models.common import StatusCode
from apishield.domain.models.errors import Success
from apishield.domain.models.outcome import HttpResult
from apishield.infrastructure.resilience.error_classifier import ErrorClassifier
from apishield.infrastructure.resilience.retry_config import RetryConfig

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(self, api_service: ApiService, ui: UserInterface, retry_config: RetryConfig):
        self.api_service = api_service
        self.ui = ui
        self.retry_config = retry_config
        self.classifier = ErrorClassifier(retry_config)

    async def handle_request(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
        max_retries: Optional[int] = None,
        raw: bool = False,
        unwrap: bool = True,
    ) -> bool:
        """Handles the 'request' command. Returns True on success."""
        logger.info(f"Handling 'request' command: {method} {url}")
        result = await self.api_service.request(
            method, url, body=body, headers=headers, max_retries=max_retries, unwrap=unwrap
        )
        if isinstance(result, Success):
            plural = "s" if result.attempts != 1 else ""
            self.ui.display_data(result.data, title=f"{method.upper()} {url} ({result.attempts} attempt{plural})", raw=raw)
            return True
        self.ui.display_api_error(result)
        return False

    def handle_backoff(self, attempts: int) -> None:
        """Handles the 'backoff' command: shows the delay after each failed attempt."""
        rows = [(n, f"{self.retry_config.delay_for(n):.1f}s") for n in range(1, attempts + 1)]
        self.ui.display_table("Backoff schedule", ["Failed attempt", "Delay"], rows)

    def handle_classify(self, status_code: int) -> None:
        """Handles the 'classify' command for a bare HTTP status code."""
        if 200 <= status_code < 300:
            self.ui.display_info(f"Status {status_code} is a success; its body is validated, not classified.")
            return
        error = self.classifier.classify(HttpResult(status_code=StatusCode(status_code)))
        self.ui.display_table(
            f"Status {status_code}",
            ["Kind", "Retryable", "Message"],
            [(error.kind.value, "yes" if error.retryable else "no", error.message)],
        )
