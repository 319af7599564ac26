"""HTTP transport built on httpx.

Sends a single attempt and reports what happened as an AttemptOutcome.
It never retries and never interprets the status code; that is the
executor's job. A body that cannot be decoded (broken content-encoding)
is reported as an empty body with the real status, so the validator sees
a parse failure rather than a network failure.
"""

import logging
from typing import Dict, Optional

import httpx

from apishield.domain.interfaces.transport import Transport
from apishield.domain.models.outcome import AttemptOutcome, HttpResult, TimeoutOutcome, TransportFailure
from apishield.domain.models.request import CredentialMode, RequestDescriptor

logger = logging.getLogger(__name__)

CREDENTIAL_HEADERS = ("authorization", "cookie")


class HttpxTransport(Transport):
    """Transport implementation using a shared ``httpx.AsyncClient``.

    Example usage:
        async with HttpxTransport(base_url="https://api.example.com/api/v1") as transport:
            executor = RetryingRequestExecutor(transport)
            result = await executor.execute(RequestDescriptor("GET", "/products"))
    """

    def __init__(
        self,
        base_url: str = "",
        auth_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        default_headers: Optional[Dict[str, str]] = None,
    ):
        """Initializes the transport.

        Args:
            base_url: Prefix for relative request URLs; also defines the
                origin for ``same-origin`` credential mode.
            auth_token: Bearer token attached according to credential mode.
            client: Pre-built client (e.g. with a mock transport); the
                transport only closes clients it created itself.
            default_headers: Headers sent with every request.
        """
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.default_headers = {k.lower(): v for k, v in (default_headers or {}).items()}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()
        logger.info(f"HttpxTransport initialized: base_url='{self.base_url or '(none)'}', auth={'yes' if auth_token else 'no'}")

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def resolve_url(self, url: str) -> str:
        if httpx.URL(url).is_absolute_url or not self.base_url:
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    def is_same_origin(self, url: str) -> bool:
        if not self.base_url:
            return not httpx.URL(url).is_absolute_url
        target, origin = httpx.URL(url), httpx.URL(self.base_url)
        return (target.scheme, target.host, target.port) == (origin.scheme, origin.host, origin.port)

    def build_headers(self, descriptor: RequestDescriptor, resolved_url: str) -> Dict[str, str]:
        headers = dict(self.default_headers)
        if descriptor.expect_json:
            headers.setdefault("accept", "application/json")
        if descriptor.body is not None and not isinstance(descriptor.body, (bytes, str)):
            headers.setdefault("content-type", "application/json")
        headers.update(descriptor.headers)

        mode = descriptor.credentials
        if mode is CredentialMode.OMIT:
            for name in CREDENTIAL_HEADERS:
                headers.pop(name, None)
        elif self.auth_token and "authorization" not in headers:
            if mode is CredentialMode.INCLUDE or self.is_same_origin(resolved_url):
                headers["authorization"] = f"Bearer {self.auth_token}"
        return headers

    async def send(self, descriptor: RequestDescriptor, timeout_s: float) -> AttemptOutcome:
        url = self.resolve_url(descriptor.url)
        headers = self.build_headers(descriptor, url)

        body_kwargs = {}
        if isinstance(descriptor.body, (bytes, str)):
            body_kwargs["content"] = descriptor.body
        elif descriptor.body is not None:
            body_kwargs["json"] = descriptor.body

        logger.debug(f"Sending {descriptor.method} {url}")
        try:
            request = self._client.build_request(
                descriptor.method,
                url,
                headers=headers,
                params=descriptor.params,
                timeout=timeout_s,
                **body_kwargs,
            )
            response = await self._client.send(request, stream=True)
            try:
                body = await response.aread()
            except httpx.DecodingError as e:
                # The response arrived; only its content-encoding is broken
                logger.warning(f"Undecodable body from {descriptor.method} {url} (status={response.status_code}): {e}")
                body = b""
            finally:
                await response.aclose()
        except httpx.TimeoutException as e:
            logger.debug(f"Timeout for {descriptor.method} {url}: {type(e).__name__}")
            return TimeoutOutcome(timeout_s)
        except httpx.TransportError as e:
            logger.debug(f"Transport error for {descriptor.method} {url}: {e!r}")
            return TransportFailure(f"{type(e).__name__}: {e}")

        return HttpResult(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=body,
        )
