"""API Service: the caller-facing contract of the resilience layer.

Builds request descriptors from plain arguments, runs them through the
retrying executor and unwraps the API's JSON envelope. Callers get back
``Success`` or a ``ClassifiedError``; they never see transport details.
"""

import logging
from typing import Any, Mapping, Optional

import httpx

from apishield.domain.models.common import HttpMethod, JsonData, QueryParams, RequestUrl
from apishield.domain.models.errors import ApiResult, Success
from apishield.domain.models.request import CredentialMode, RequestDescriptor
from apishield.infrastructure.resilience.api_retry import RetryingRequestExecutor

logger = logging.getLogger(__name__)


def unwrap_envelope(payload: JsonData) -> JsonData:
    """Returns the ``data`` member of a ``{"success": ..., "data": ...}`` envelope.

    Anything that is not such an envelope is returned untouched.
    """
    if isinstance(payload, dict) and "success" in payload and "data" in payload:
        return payload["data"]
    return payload


class ApiService:
    """Issues API calls relative to a base path."""

    def __init__(self, executor: RetryingRequestExecutor, base_path: str = ""):
        self.executor = executor
        self.base_path = base_path

    def build_url(self, url: str) -> str:
        """Prefixes ``base_path`` unless ``url`` is already absolute."""
        if httpx.URL(url).is_absolute_url:
            return url
        return f"{self.base_path}{url}"

    async def request(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: QueryParams = None,
        credentials: CredentialMode = CredentialMode.SAME_ORIGIN,
        max_retries: Optional[int] = None,
        expect_json: bool = True,
        unwrap: bool = True,
    ) -> ApiResult:
        """Runs one logical call.

        Args:
            method: HTTP method.
            url: Path relative to ``base_path``, or an absolute URL which is
                used as is.
            body: JSON-serialisable payload, or raw str/bytes.
            headers: Extra request headers.
            params: Query string parameters.
            credentials: Credential mode for the transport.
            max_retries: Total attempt budget override.
            expect_json: Whether the response must be JSON.
            unwrap: Unwrap the ``{"success", "data"}`` envelope on success.

        Returns:
            Success or the terminal ClassifiedError.
        """
        descriptor = RequestDescriptor(
            method=HttpMethod(method),
            url=RequestUrl(self.build_url(url)),
            body=body,
            headers=headers or {},
            credentials=credentials,
            expect_json=expect_json,
            params=params,
        )
        result = await self.executor.execute(descriptor, max_retries=max_retries)
        if isinstance(result, Success):
            if unwrap:
                return Success(data=unwrap_envelope(result.data), attempts=result.attempts)
            return result
        logger.info(f"{descriptor.describe()} failed: {result.describe()}")
        return result

    async def get(self, url: str, **kwargs: Any) -> ApiResult:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, body: Optional[Any] = None, **kwargs: Any) -> ApiResult:
        return await self.request("POST", url, body=body, **kwargs)

    async def put(self, url: str, body: Optional[Any] = None, **kwargs: Any) -> ApiResult:
        return await self.request("PUT", url, body=body, **kwargs)

    async def patch(self, url: str, body: Optional[Any] = None, **kwargs: Any) -> ApiResult:
        return await self.request("PATCH", url, body=body, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> ApiResult:
        return await self.request("DELETE", url, **kwargs)
