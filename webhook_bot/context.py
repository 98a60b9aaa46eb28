"""Per-update read-only view handed to middleware and handlers."""
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from telegram import Message, Update, User
from telegram.constants import ParseMode

from webhook_bot.updates import MESSAGE_FIELDS, EventKind, IncomingUpdate

if TYPE_CHECKING:
    from webhook_bot.api import TelegramApi

GROUP_CHAT_TYPES = ("group", "supergroup")


@dataclass(frozen=True)
class Context:
    """Derived view over exactly one update plus the outbound client.

    Built once per update at the start of dispatch and discarded when the
    update has been processed. All properties are projections of the update;
    nothing here mutates it.
    """

    update: Update
    api: "TelegramApi" = field(repr=False, compare=False)
    kinds: frozenset[EventKind] = frozenset()

    @classmethod
    def derive(cls, incoming: IncomingUpdate, api: "TelegramApi") -> "Context":
        return cls(update=incoming.update, api=api, kinds=incoming.kinds)

    @property
    def message(self) -> Message | None:
        for name in MESSAGE_FIELDS:
            message = getattr(self.update, name, None)
            if message is not None:
                return message
        return None

    @property
    def chat_id(self) -> int | None:
        message = self.message
        return message.chat.id if message else None

    @property
    def user(self) -> User | None:
        message = self.message
        return message.from_user if message else None

    @property
    def chat_type(self) -> str | None:
        message = self.message
        return message.chat.type if message else None

    @property
    def is_private_chat(self) -> bool:
        return self.chat_type == "private"

    @property
    def is_group_chat(self) -> bool:
        return self.chat_type in GROUP_CHAT_TYPES

    @property
    def text(self) -> str | None:
        message = self.message
        return message.text if message else None

    @property
    def command(self) -> str | None:
        """Lower-cased command token of a ``/command args`` message."""
        text = self.text
        if text is None or not text.startswith("/"):
            return None
        return text[1:].split(" ", 1)[0].lower()

    @property
    def args(self) -> list[str]:
        """Space-separated tokens following the command token."""
        if self.command is None:
            return []
        return self.text.split(" ")[1:]

    async def reply(self, text: str, **extra: Any) -> Message:
        """Send ``text`` to the chat the update came from.

        Raises:
            ValueError: If the update has no chat or the text is blank.
        """
        if self.chat_id is None:
            raise ValueError("Could not find chat ID to reply to.")
        if not text or not text.strip():
            raise ValueError("Reply text cannot be empty.")
        return await self.api.send_message(self.chat_id, text, **extra)

    async def reply_with_markdown(self, text: str, **extra: Any) -> Message:
        return await self.reply(text, **{**extra, "parse_mode": ParseMode.MARKDOWN})

    async def reply_with_html(self, text: str, **extra: Any) -> Message:
        return await self.reply(text, **{**extra, "parse_mode": ParseMode.HTML})
