"""Parsing and classification of inbound Telegram updates.

Every update is tagged with a closed set of event kinds when it is parsed.
The kinds describe which update variant arrived (``message``,
``edited_message``, ``callback_query``...) and what the carried message
contains (``text``, ``sticker``, ``photo``...). Event handlers are matched by
comparing their trigger against these tags, so an unrelated payload field
that happens to share a name with a trigger never matches.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any

from telegram import Bot, Update


class EventKind(str, Enum):
    """Closed set of event tags an update can carry."""

    # Update variants
    MESSAGE = "message"
    EDITED_MESSAGE = "edited_message"
    CHANNEL_POST = "channel_post"
    EDITED_CHANNEL_POST = "edited_channel_post"
    CALLBACK_QUERY = "callback_query"
    INLINE_QUERY = "inline_query"
    CHOSEN_INLINE_RESULT = "chosen_inline_result"
    SHIPPING_QUERY = "shipping_query"
    PRE_CHECKOUT_QUERY = "pre_checkout_query"
    POLL_ANSWER = "poll_answer"
    MY_CHAT_MEMBER = "my_chat_member"
    CHAT_MEMBER = "chat_member"
    CHAT_JOIN_REQUEST = "chat_join_request"
    MESSAGE_REACTION = "message_reaction"

    # Message contents
    TEXT = "text"
    CAPTION = "caption"
    STICKER = "sticker"
    PHOTO = "photo"
    VIDEO = "video"
    VIDEO_NOTE = "video_note"
    VOICE = "voice"
    AUDIO = "audio"
    DOCUMENT = "document"
    ANIMATION = "animation"
    CONTACT = "contact"
    LOCATION = "location"
    VENUE = "venue"
    POLL = "poll"
    DICE = "dice"
    GAME = "game"
    INVOICE = "invoice"
    SUCCESSFUL_PAYMENT = "successful_payment"
    NEW_CHAT_MEMBERS = "new_chat_members"
    LEFT_CHAT_MEMBER = "left_chat_member"
    NEW_CHAT_TITLE = "new_chat_title"
    NEW_CHAT_PHOTO = "new_chat_photo"
    PINNED_MESSAGE = "pinned_message"
    REPLY_TO_MESSAGE = "reply_to_message"


# Message-like update fields, in resolution order.
MESSAGE_FIELDS = ("message", "edited_message", "channel_post", "edited_channel_post")

UPDATE_KINDS = frozenset(
    {
        EventKind.MESSAGE,
        EventKind.EDITED_MESSAGE,
        EventKind.CHANNEL_POST,
        EventKind.EDITED_CHANNEL_POST,
        EventKind.CALLBACK_QUERY,
        EventKind.INLINE_QUERY,
        EventKind.CHOSEN_INLINE_RESULT,
        EventKind.SHIPPING_QUERY,
        EventKind.PRE_CHECKOUT_QUERY,
        EventKind.POLL,
        EventKind.POLL_ANSWER,
        EventKind.MY_CHAT_MEMBER,
        EventKind.CHAT_MEMBER,
        EventKind.CHAT_JOIN_REQUEST,
        EventKind.MESSAGE_REACTION,
    }
)

MESSAGE_KINDS = frozenset(kind for kind in EventKind if kind not in UPDATE_KINDS) | {
    EventKind.POLL
}


@dataclass(frozen=True)
class IncomingUpdate:
    """A parsed update together with the event kinds it was tagged with."""

    update: Update
    kinds: frozenset[EventKind]

    @property
    def update_id(self) -> int:
        return self.update.update_id


def first_message_payload(data: dict[str, Any]) -> dict[str, Any] | None:
    """Return the first message-like object present in a raw update."""
    for field in MESSAGE_FIELDS:
        payload = data.get(field)
        if payload is not None:
            return payload
    return None


def classify(data: dict[str, Any]) -> frozenset[EventKind]:
    """Tag a raw update dict with the event kinds it carries."""
    kinds = {
        kind
        for kind in UPDATE_KINDS
        if data.get(kind.value) is not None
    }
    message = first_message_payload(data)
    if isinstance(message, dict):
        kinds.update(
            kind for kind in MESSAGE_KINDS if message.get(kind.value) is not None
        )
    return frozenset(kinds)


def parse_update(data: dict[str, Any], bot: Bot | None = None) -> IncomingUpdate:
    """Deserialize a webhook body into an :class:`IncomingUpdate`.

    Args:
        data: Raw JSON dict from Telegram's webhook POST body.
        bot: Bot instance bound to the deserialized objects, if any.

    Raises:
        ValueError: If the payload is not a valid Telegram update.
    """
    if not isinstance(data, dict):
        raise ValueError("Telegram update must be a JSON object")
    kinds = classify(data)
    try:
        update = Update.de_json(data, bot)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid Telegram update: {e}") from e
    if update is None:
        raise ValueError("Invalid Telegram update: de_json returned None")
    return IncomingUpdate(update=update, kinds=kinds)
