import pytest
from unittest.mock import AsyncMock, MagicMock

from apishield.core.services.api_service import ApiService, unwrap_envelope
from apishield.domain.models.errors import ClassifiedError, ErrorKind, Success
from apishield.domain.models.request import CredentialMode
from apishield.infrastructure.resilience.api_retry import RetryingRequestExecutor


@pytest.fixture
def mock_executor():
    mock = MagicMock(spec=RetryingRequestExecutor)
    mock.execute = AsyncMock(return_value=Success(data={"success": True, "data": {"id": 7}}, attempts=1))
    return mock


@pytest.fixture
def api_service(mock_executor):
    return ApiService(executor=mock_executor, base_path="/referrals")


@pytest.mark.asyncio
async def test_request_builds_descriptor_and_unwraps(api_service: ApiService, mock_executor: MagicMock):
    result = await api_service.post("/links", {"campaign": "spring"}, headers={"X-Trace": "1"}, max_retries=2)

    assert result == Success(data={"id": 7}, attempts=1)
    descriptor = mock_executor.execute.call_args.args[0]
    assert descriptor.method == "POST"
    assert descriptor.url == "/referrals/links"
    assert descriptor.body == {"campaign": "spring"}
    assert descriptor.headers["x-trace"] == "1"
    assert descriptor.credentials is CredentialMode.SAME_ORIGIN
    assert mock_executor.execute.call_args.kwargs["max_retries"] == 2


@pytest.mark.asyncio
async def test_envelope_kept_when_unwrap_disabled(api_service: ApiService):
    result = await api_service.get("/links", unwrap=False)
    assert result.data == {"success": True, "data": {"id": 7}}


@pytest.mark.asyncio
async def test_errors_are_returned_unchanged(api_service: ApiService, mock_executor: MagicMock):
    error = ClassifiedError.of(ErrorKind.UNAUTHORIZED, retryable=False, status_code=401)
    mock_executor.execute.return_value = error

    result = await api_service.delete("/links/1")

    assert result is error
    assert mock_executor.execute.call_args.args[0].method == "DELETE"


@pytest.mark.asyncio
@pytest.mark.parametrize("verb, method", [("get", "GET"), ("put", "PUT"), ("patch", "PATCH")])
async def test_verb_helpers(api_service: ApiService, mock_executor: MagicMock, verb, method):
    await getattr(api_service, verb)("/x")
    assert mock_executor.execute.call_args.args[0].method == method


@pytest.mark.asyncio
async def test_unknown_method_is_rejected(api_service: ApiService):
    with pytest.raises(ValueError, match="Unsupported HTTP method"):
        await api_service.request("FETCH", "/x")


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"success": True, "data": [1, 2]}, [1, 2]),
        ({"success": True, "data": None, "message": "ok"}, None),
        ({"data": [1]}, {"data": [1]}),
        ([1, 2], [1, 2]),
        ("text", "text"),
    ],
)
def test_unwrap_envelope(payload, expected):
    assert unwrap_envelope(payload) == expected


@pytest.mark.asyncio
async def test_absolute_url_skips_base_path(api_service: ApiService, mock_executor: MagicMock):
    await api_service.get("https://other.example.com/health")

    descriptor = mock_executor.execute.call_args.args[0]
    assert descriptor.url == "https://other.example.com/health"
    assert api_service.build_url("/stats") == "/referrals/stats"
