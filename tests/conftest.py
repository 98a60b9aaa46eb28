"""Shared fixtures: realistic webhook payloads and a mocked outbound client."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from webhook_bot.api import TelegramApi
from webhook_bot.context import Context
from webhook_bot.updates import parse_update

ADMIN_ID = 1001
USER_ID = 789


def message_payload(
    text: str | None = "hello",
    chat_id: int = USER_ID,
    chat_type: str = "private",
    **extra,
) -> dict:
    message = {
        "message_id": 456,
        "from": {
            "id": chat_id,
            "is_bot": False,
            "first_name": "Test",
            "last_name": "User",
            "language_code": "en",
        },
        "chat": {"id": chat_id, "type": chat_type, "first_name": "Test"},
        "date": 1609459200,
    }
    if text is not None:
        message["text"] = text
    message.update(extra)
    return message


def sticker_payload() -> dict:
    return {
        "file_id": "CAACAgIAAxkBAAIB",
        "file_unique_id": "AgADBAAD",
        "type": "regular",
        "width": 512,
        "height": 512,
        "is_animated": False,
        "is_video": False,
    }


@pytest.fixture
def sticker():
    return sticker_payload()


@pytest.fixture
def make_update():
    """Factory for raw webhook update dicts."""

    def _make_update(
        text: str | None = "hello",
        chat_id: int = USER_ID,
        chat_type: str = "private",
        field: str = "message",
        **extra,
    ) -> dict:
        return {
            "update_id": 123,
            field: message_payload(text, chat_id=chat_id, chat_type=chat_type, **extra),
        }

    return _make_update


@pytest.fixture
def api():
    """Outbound client with every network call mocked."""
    client = MagicMock(spec=TelegramApi)
    client.bot = None
    client.send_message = AsyncMock(return_value=MagicMock(message_id=1))
    client.get_me = AsyncMock()
    client.set_webhook = AsyncMock(return_value=True)
    return client


@pytest.fixture
def make_context(api):
    """Factory turning a raw update dict into a Context bound to ``api``."""

    def _make_context(data: dict) -> Context:
        return Context.derive(parse_update(data), api)

    return _make_context
