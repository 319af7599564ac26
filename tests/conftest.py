import asyncio
import os
import json
import logging
from typing import Any, List

import pytest

from apishield.domain.interfaces.transport import Transport
from apishield.domain.models.outcome import HttpResult
from apishield.infrastructure.config import settings
from apishield.infrastructure.monitoring.logger_setup import API_LOGGER_NAME


class ScriptedTransport(Transport):
    """Transport that replays a fixed list of outcomes (or raises exceptions)."""

    def __init__(self, outcomes: List[Any]):
        self.outcomes = list(outcomes)
        self.calls = []

    async def send(self, descriptor, timeout_s):
        self.calls.append((descriptor, timeout_s))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def json_result(data: Any, status: int = 200) -> HttpResult:
    return HttpResult(
        status_code=status,
        headers={"Content-Type": "application/json; charset=utf-8"},
        body=json.dumps(data).encode("utf-8"),
    )


@pytest.fixture
def make_transport():
    """Factory fixture building a ScriptedTransport from outcomes."""
    return ScriptedTransport


@pytest.fixture
def sleeps():
    """Records backoff delays instead of actually sleeping."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)
        await asyncio.sleep(0)
    return _sleep


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keeps tests away from the user's config file, .env and env vars."""
    monkeypatch.setattr(settings, "_loaded", True)
    monkeypatch.setattr(settings, "_config", {})
    for key in list(os.environ):
        if key.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(key)
    yield
    settings.clear_test_config()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handler changes made by setup_logging during a test."""
    root = logging.getLogger()
    api_logger = logging.getLogger(API_LOGGER_NAME)
    root_handlers, root_level = root.handlers[:], root.level
    api_handlers, api_level, api_propagate = api_logger.handlers[:], api_logger.level, api_logger.propagate
    yield
    root.handlers[:] = root_handlers
    root.setLevel(root_level)
    api_logger.handlers[:] = api_handlers
    api_logger.setLevel(api_level)
    api_logger.propagate = api_propagate


@pytest.fixture(name="json_result")
def json_result_fixture():
    """Builds a JSON HttpResult: json_result(data, status=200)."""
    return json_result
