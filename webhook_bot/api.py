"""Outbound Telegram Bot API client.

Thin wrapper around python-telegram-bot's :class:`telegram.Bot`. It exposes
the generic ``call(method, params)`` escape hatch plus the typed wrappers the
handlers use, and converts library errors into :class:`TelegramApiError` so
callers only need to catch one exception type.
"""
import logging
from typing import Any, Awaitable, TypeVar

from telegram import Bot, Message, User, WebhookInfo
from telegram.error import TelegramError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TelegramApiError(Exception):
    """Raised when a Bot API call fails."""

    def __init__(self, method: str, error: Exception):
        super().__init__(f"Telegram API error for method {method}: {error}")
        self.method = method
        self.error = error


class TelegramApi:
    """Async Bot API client used by the dispatcher and handlers."""

    def __init__(self, token: str | None = None, bot: Bot | None = None):
        """Create the client.

        Args:
            token: Bot token (from @BotFather). Ignored if ``bot`` is given.
            bot: Pre-built python-telegram-bot ``Bot``, mainly for tests.
        """
        if bot is None:
            if not token:
                raise ValueError("Telegram bot token is empty")
            bot = Bot(token=token)
        self.bot = bot

    async def initialize(self) -> None:
        """Open the HTTP session to the Bot API."""
        await self.bot.initialize()

    async def shutdown(self) -> None:
        """Close the HTTP session and release resources."""
        await self.bot.shutdown()

    async def _guard(self, method: str, request: Awaitable[T]) -> T:
        try:
            return await request
        except TelegramError as e:
            logger.error(f"Telegram API error for method {method}: {e}")
            raise TelegramApiError(method, e) from e

    async def call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Invoke any Bot API method and return the parsed JSON result."""
        return await self._guard(
            method, self.bot.do_api_request(method, api_kwargs=params or {})
        )

    # ------------------------------------------------------------------
    # Getting information
    # ------------------------------------------------------------------

    async def get_me(self) -> User:
        return await self._guard("getMe", self.bot.get_me())

    async def get_webhook_info(self) -> WebhookInfo:
        return await self._guard("getWebhookInfo", self.bot.get_webhook_info())

    # ------------------------------------------------------------------
    # Sending and editing messages
    # ------------------------------------------------------------------

    async def send_message(self, chat_id: int, text: str, **extra: Any) -> Message:
        return await self._guard(
            "sendMessage", self.bot.send_message(chat_id=chat_id, text=text, **extra)
        )

    async def send_photo(self, chat_id: int, photo: str, **extra: Any) -> Message:
        return await self._guard(
            "sendPhoto", self.bot.send_photo(chat_id=chat_id, photo=photo, **extra)
        )

    async def send_document(self, chat_id: int, document: str, **extra: Any) -> Message:
        return await self._guard(
            "sendDocument",
            self.bot.send_document(chat_id=chat_id, document=document, **extra),
        )

    async def send_sticker(self, chat_id: int, sticker: str, **extra: Any) -> Message:
        return await self._guard(
            "sendSticker",
            self.bot.send_sticker(chat_id=chat_id, sticker=sticker, **extra),
        )

    async def send_chat_action(self, chat_id: int, action: str) -> bool:
        return await self._guard(
            "sendChatAction", self.bot.send_chat_action(chat_id=chat_id, action=action)
        )

    async def edit_message_text(
        self, chat_id: int, message_id: int, text: str, **extra: Any
    ) -> Message | bool:
        return await self._guard(
            "editMessageText",
            self.bot.edit_message_text(
                text=text, chat_id=chat_id, message_id=message_id, **extra
            ),
        )

    async def delete_message(self, chat_id: int, message_id: int) -> bool:
        return await self._guard(
            "deleteMessage",
            self.bot.delete_message(chat_id=chat_id, message_id=message_id),
        )

    async def forward_message(
        self, chat_id: int, from_chat_id: int, message_id: int, **extra: Any
    ) -> Message:
        return await self._guard(
            "forwardMessage",
            self.bot.forward_message(
                chat_id=chat_id,
                from_chat_id=from_chat_id,
                message_id=message_id,
                **extra,
            ),
        )

    async def answer_callback_query(self, callback_query_id: str, **extra: Any) -> bool:
        return await self._guard(
            "answerCallbackQuery",
            self.bot.answer_callback_query(callback_query_id=callback_query_id, **extra),
        )

    # ------------------------------------------------------------------
    # Webhook management
    # ------------------------------------------------------------------

    async def set_webhook(self, url: str, secret_token: str | None = None) -> bool:
        return await self._guard(
            "setWebhook", self.bot.set_webhook(url=url, secret_token=secret_token)
        )

    async def delete_webhook(self, drop_pending_updates: bool | None = None) -> bool:
        return await self._guard(
            "deleteWebhook",
            self.bot.delete_webhook(drop_pending_updates=drop_pending_updates),
        )
