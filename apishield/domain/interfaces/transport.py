"""Interface for HTTP transports.

Defines the contract for issuing a single request attempt. The executor
treats a transport as an opaque capability: it does not manage connection
pooling, TLS or cookies.
"""

import abc

from apishield.domain.models.outcome import AttemptOutcome
from apishield.domain.models.request import RequestDescriptor


class Transport(abc.ABC):
    """Abstract Base Class for sending one request attempt."""

    @abc.abstractmethod
    async def send(self, descriptor: RequestDescriptor, timeout_s: float) -> AttemptOutcome:
        """Sends the request once and reports what happened.

        Implementations should map their own failures onto the outcome
        variants instead of raising: TransportFailure when no response
        arrived, TimeoutOutcome when the window expired, HttpResult
        otherwise (whatever the status code).

        Args:
            descriptor: The request to send.
            timeout_s: Upper bound for this attempt, in seconds.

        Returns:
            Exactly one AttemptOutcome.
        """
        pass

    async def aclose(self) -> None:
        """Releases any held resources. Default is a no-op."""
        return None
