"""Shared test fixtures for the bot API library."""

import pytest

from botapi import BotConfig, MockTransport, UpdateStream


@pytest.fixture
def bot_config() -> BotConfig:
    return BotConfig(bot_token="123456789:test_token")


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def stream() -> UpdateStream:
    return UpdateStream(maxsize=10)


@pytest.fixture
def message_payload() -> dict:
    return {
        "message_id": 10,
        "date": 1700000000,
        "chat": {"id": 42, "type": "private", "first_name": "Ada"},
        "from": {"id": 7, "first_name": "Ada", "last_name": "Lovelace"},
        "text": "hello",
    }


@pytest.fixture
def callback_payload(message_payload: dict) -> dict:
    return {
        "id": "cb-1",
        "from": {"id": 7, "first_name": "Ada"},
        "message": message_payload,
        "chat_instance": "ci-1",
        "data": "vote:yes",
    }
