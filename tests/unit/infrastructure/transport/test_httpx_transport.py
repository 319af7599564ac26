import json

import httpx
import pytest

from apishield.domain.models.errors import ErrorKind
from apishield.domain.models.outcome import HttpResult, TimeoutOutcome, TransportFailure
from apishield.domain.models.request import CredentialMode, RequestDescriptor
from apishield.infrastructure.resilience.error_classifier import classify
from apishield.infrastructure.resilience.response_validator import validate
from apishield.infrastructure.transport.httpx_transport import HttpxTransport

BASE_URL = "https://api.example.com/api/v1"


@pytest.fixture
def captured():
    return []


def make_transport(handler, auth_token=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(base_url=BASE_URL, auth_token=auth_token, client=client), client


def recording_handler(captured, status=200, body=b'{"ok": true}', content_type="application/json"):
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(status, headers={"content-type": content_type}, content=body)
    return handler


@pytest.mark.asyncio
async def test_successful_response_becomes_http_result(captured):
    transport, client = make_transport(recording_handler(captured))
    async with client:
        outcome = await transport.send(RequestDescriptor("GET", "/products", params={"page": 2}), 5.0)

    assert isinstance(outcome, HttpResult)
    assert outcome.status_code == 200
    assert outcome.content_type == "application/json"
    assert outcome.body == b'{"ok": true}'
    assert str(captured[0].url) == "https://api.example.com/api/v1/products?page=2"
    assert captured[0].headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_error_status_is_reported_not_raised(captured):
    transport, client = make_transport(recording_handler(captured, status=503, body=b"busy", content_type="text/plain"))
    async with client:
        outcome = await transport.send(RequestDescriptor("GET", "/products"), 5.0)

    assert outcome.status_code == 503
    assert outcome.text == "busy"


@pytest.mark.asyncio
async def test_json_body_is_serialised(captured):
    transport, client = make_transport(recording_handler(captured, status=201))
    async with client:
        await transport.send(RequestDescriptor("POST", "/referrals", body={"code": "ABC"}), 5.0)

    request = captured[0]
    assert request.method == "POST"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"code": "ABC"}


@pytest.mark.asyncio
async def test_connect_error_is_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport, client = make_transport(handler)
    async with client:
        outcome = await transport.send(RequestDescriptor("GET", "/products"), 5.0)

    assert isinstance(outcome, TransportFailure)
    assert "ConnectError" in outcome.reason


@pytest.mark.asyncio
async def test_read_timeout_is_timeout_outcome():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    transport, client = make_transport(handler)
    async with client:
        outcome = await transport.send(RequestDescriptor("GET", "/products"), 2.5)

    assert outcome == TimeoutOutcome(2.5)


@pytest.mark.asyncio
async def test_undecodable_body_keeps_status_and_parses_as_unusable():
    def handler(request):
        return httpx.Response(
            200,
            headers={"content-type": "application/json", "content-encoding": "gzip"},
            stream=httpx.ByteStream(b"definitely not gzip"),
        )

    transport, client = make_transport(handler)
    async with client:
        outcome = await transport.send(RequestDescriptor("GET", "/products"), 5.0)

    assert isinstance(outcome, HttpResult)
    assert outcome.status_code == 200
    assert outcome.body == b""
    assert classify(outcome, validate(outcome)).kind is ErrorKind.PARSE_ERROR


@pytest.mark.asyncio
async def test_bearer_token_sent_to_same_origin(captured):
    transport, client = make_transport(recording_handler(captured), auth_token="secret")
    async with client:
        await transport.send(RequestDescriptor("GET", "/me"), 5.0)

    assert captured[0].headers["authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_same_origin_mode_keeps_token_from_other_hosts(captured):
    transport, client = make_transport(recording_handler(captured), auth_token="secret")
    async with client:
        await transport.send(RequestDescriptor("GET", "https://cdn.example.net/data.json"), 5.0)

    assert "authorization" not in captured[0].headers


@pytest.mark.asyncio
async def test_include_mode_sends_token_everywhere(captured):
    transport, client = make_transport(recording_handler(captured), auth_token="secret")
    descriptor = RequestDescriptor("GET", "https://cdn.example.net/data.json", credentials=CredentialMode.INCLUDE)
    async with client:
        await transport.send(descriptor, 5.0)

    assert captured[0].headers["authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_omit_mode_strips_credentials(captured):
    transport, client = make_transport(recording_handler(captured), auth_token="secret")
    descriptor = RequestDescriptor(
        "GET", "/public",
        headers={"Authorization": "Bearer other", "Cookie": "session=1", "X-Trace": "t1"},
        credentials="omit",
    )
    async with client:
        await transport.send(descriptor, 5.0)

    headers = captured[0].headers
    assert "authorization" not in headers
    assert "cookie" not in headers
    assert headers["x-trace"] == "t1"


def test_resolve_url():
    transport = HttpxTransport(base_url=BASE_URL + "/", client=httpx.AsyncClient())
    assert transport.resolve_url("/products") == f"{BASE_URL}/products"
    assert transport.resolve_url("products") == f"{BASE_URL}/products"
    assert transport.resolve_url("http://other.test/x") == "http://other.test/x"


@pytest.mark.asyncio
async def test_context_manager_closes_owned_client():
    transport = HttpxTransport(base_url=BASE_URL)
    async with transport:
        pass
    assert transport._client.is_closed
