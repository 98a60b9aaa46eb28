from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.error import NetworkError

from webhook_bot.api import TelegramApi, TelegramApiError

FAKE_TOKEN = "123456:AAHdqTcvCH1vGWJxfSeofSAs0K5P"


@pytest.fixture
def bot():
    return MagicMock()


@pytest.fixture
def client(bot):
    return TelegramApi(bot=bot)


def test_empty_token_rejected():
    with pytest.raises(ValueError, match="token is empty"):
        TelegramApi("")


def test_builds_bot_from_token():
    client = TelegramApi(FAKE_TOKEN)
    assert client.bot.token == FAKE_TOKEN


@pytest.mark.asyncio
async def test_call_uses_generic_api_request(client, bot):
    bot.do_api_request = AsyncMock(return_value={"id": 1, "is_bot": True})
    result = await client.call("getMe")
    assert result == {"id": 1, "is_bot": True}
    bot.do_api_request.assert_awaited_once_with("getMe", api_kwargs={})


@pytest.mark.asyncio
async def test_call_passes_params(client, bot):
    bot.do_api_request = AsyncMock(return_value=True)
    await client.call("sendChatAction", {"chat_id": 1, "action": "typing"})
    bot.do_api_request.assert_awaited_once_with(
        "sendChatAction", api_kwargs={"chat_id": 1, "action": "typing"}
    )


@pytest.mark.asyncio
async def test_send_message_forwards_extra(client, bot):
    sent = MagicMock(message_id=42)
    bot.send_message = AsyncMock(return_value=sent)
    result = await client.send_message(10, "hi", parse_mode="HTML")
    assert result is sent
    bot.send_message.assert_awaited_once_with(chat_id=10, text="hi", parse_mode="HTML")


@pytest.mark.asyncio
async def test_library_errors_are_wrapped(client, bot):
    bot.send_message = AsyncMock(side_effect=NetworkError("connection reset"))
    with pytest.raises(TelegramApiError) as exc_info:
        await client.send_message(10, "hi")
    assert exc_info.value.method == "sendMessage"
    assert isinstance(exc_info.value.error, NetworkError)


@pytest.mark.asyncio
async def test_set_webhook(client, bot):
    bot.set_webhook = AsyncMock(return_value=True)
    assert await client.set_webhook("https://example.com/webhook", secret_token="s") is True
    bot.set_webhook.assert_awaited_once_with(
        url="https://example.com/webhook", secret_token="s"
    )


@pytest.mark.asyncio
async def test_lifecycle_delegates_to_bot(client, bot):
    bot.initialize = AsyncMock()
    bot.shutdown = AsyncMock()
    await client.initialize()
    await client.shutdown()
    bot.initialize.assert_awaited_once()
    bot.shutdown.assert_awaited_once()
