import pytest
from unittest.mock import AsyncMock, MagicMock

from apishield.core.command_handler import CommandHandler
from apishield.core.services.api_service import ApiService
from apishield.domain.interfaces.user_interface import UserInterface
from apishield.domain.models.errors import ClassifiedError, ErrorKind, Success
from apishield.infrastructure.resilience.retry_config import RetryConfig


@pytest.fixture
def mock_api_service():
    mock = MagicMock(spec=ApiService)
    mock.request = AsyncMock()
    return mock


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def command_handler(mock_api_service, mock_ui):
    """Fixture to create CommandHandler with mocked services."""
    return CommandHandler(api_service=mock_api_service, ui=mock_ui, retry_config=RetryConfig())


@pytest.mark.asyncio
async def test_handle_request_success(command_handler: CommandHandler, mock_api_service: MagicMock, mock_ui: MagicMock):
    mock_api_service.request.return_value = Success(data={"id": 1}, attempts=2)

    ok = await command_handler.handle_request("get", "/products/1")

    assert ok is True
    mock_ui.display_data.assert_called_once_with({"id": 1}, title="GET /products/1 (2 attempts)", raw=False)
    mock_ui.display_api_error.assert_not_called()


@pytest.mark.asyncio
async def test_handle_request_failure(command_handler: CommandHandler, mock_api_service: MagicMock, mock_ui: MagicMock):
    error = ClassifiedError.of(ErrorKind.NOT_FOUND, retryable=False, status_code=404)
    mock_api_service.request.return_value = error

    ok = await command_handler.handle_request("GET", "/products/404", max_retries=1)

    assert ok is False
    mock_ui.display_api_error.assert_called_once_with(error)
    assert mock_api_service.request.call_args.kwargs["max_retries"] == 1


def test_handle_backoff(command_handler: CommandHandler, mock_ui: MagicMock):
    command_handler.handle_backoff(5)
    title, columns, rows = mock_ui.display_table.call_args.args
    assert [delay for _, delay in rows] == ["1.0s", "2.0s", "4.0s", "8.0s", "10.0s"]


def test_handle_classify(command_handler: CommandHandler, mock_ui: MagicMock):
    command_handler.handle_classify(429)
    title, columns, rows = mock_ui.display_table.call_args.args
    assert rows == [("SERVER_ERROR", "yes", "The server is experiencing issues. Please try again in a few moments.")]


def test_handle_classify_success_status(command_handler: CommandHandler, mock_ui: MagicMock):
    command_handler.handle_classify(200)
    mock_ui.display_info.assert_called_once()
    mock_ui.display_table.assert_not_called()
