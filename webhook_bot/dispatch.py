"""Handler registry and priority dispatcher.

Handlers are kept in one ordered list and looked up first-match-wins. For
every update the dispatcher consults three tiers in a fixed order and
invokes at most one handler:

  1. command  - ``/token args`` messages, token compared lower-cased
  2. text     - exact full message text
  3. event    - first event registration whose kind the update carries

An update that matches nothing is not an error.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from webhook_bot.context import Context
from webhook_bot.errors import ErrorEnvelope, HandlerCallback
from webhook_bot.metrics import HANDLERS_TOTAL, UNHANDLED_TOTAL
from webhook_bot.updates import EventKind

logger = logging.getLogger(__name__)


class HandlerKind(str, Enum):
    COMMAND = "command"
    TEXT = "text"
    EVENT = "event"


@dataclass(frozen=True)
class Registration:
    """One handler and the trigger it is keyed on.

    Command triggers are stored lower-cased. Event triggers must name an
    :class:`EventKind`; anything else is rejected at registration time.
    """

    kind: HandlerKind
    trigger: str | None
    callback: HandlerCallback

    def __post_init__(self):
        kind = HandlerKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if kind is HandlerKind.EVENT:
            if self.trigger is not None:
                try:
                    object.__setattr__(self, "trigger", EventKind(self.trigger))
                except ValueError:
                    raise ValueError(f"Unknown event kind: {self.trigger!r}") from None
            return
        if not isinstance(self.trigger, str) or not self.trigger:
            raise ValueError(f"{kind.value} handlers require a non-empty trigger")
        if kind is HandlerKind.COMMAND:
            object.__setattr__(self, "trigger", self.trigger.lower())


def command(trigger: str, callback: HandlerCallback) -> Registration:
    return Registration(HandlerKind.COMMAND, trigger, callback)


def text(trigger: str, callback: HandlerCallback) -> Registration:
    return Registration(HandlerKind.TEXT, trigger, callback)


def event(trigger: str | EventKind, callback: HandlerCallback) -> Registration:
    return Registration(HandlerKind.EVENT, trigger, callback)


class HandlerRegistry:
    """Ordered handler registrations; the first match wins on lookup."""

    def __init__(self, registrations: Iterable[Registration] = ()):
        self._entries: list[Registration] = []
        self._frozen = False
        for registration in registrations:
            self.add(registration)

    def add(self, registration: Registration) -> Registration:
        if self._frozen:
            raise RuntimeError("Cannot register handlers after dispatch has started")
        self._entries.append(registration)
        return registration

    def command(self, trigger: str, callback: HandlerCallback) -> Registration:
        return self.add(command(trigger, callback))

    def text(self, trigger: str, callback: HandlerCallback) -> Registration:
        return self.add(text(trigger, callback))

    def event(self, trigger: str | EventKind, callback: HandlerCallback) -> Registration:
        return self.add(event(trigger, callback))

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[Registration]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def prepend(self, other: "HandlerRegistry") -> "HandlerRegistry":
        """Frozen registry searching ``other`` first, then this one."""
        merged = HandlerRegistry([*other, *self])
        merged.freeze()
        return merged

    def find_command(self, token: str) -> Registration | None:
        token = token.lower()
        for entry in self._entries:
            if entry.kind is HandlerKind.COMMAND and entry.trigger == token:
                return entry
        return None

    def find_text(self, message_text: str) -> Registration | None:
        for entry in self._entries:
            if entry.kind is HandlerKind.TEXT and entry.trigger == message_text:
                return entry
        return None

    def find_event(self, kinds: frozenset[EventKind]) -> Registration | None:
        for entry in self._entries:
            if entry.kind is HandlerKind.EVENT and entry.trigger in kinds:
                return entry
        return None


class Dispatcher:
    """Selects at most one handler per update and runs it in the envelope."""

    def __init__(self, envelope: ErrorEnvelope | None = None):
        self.envelope = envelope or ErrorEnvelope()

    def select(self, ctx: Context, registry: HandlerRegistry) -> Registration | None:
        token = ctx.command
        if token is not None:
            registration = registry.find_command(token)
            if registration is not None:
                return registration

        message_text = ctx.text
        if message_text is not None:
            registration = registry.find_text(message_text)
            if registration is not None:
                return registration

        return registry.find_event(ctx.kinds)

    async def dispatch(self, ctx: Context, registry: HandlerRegistry) -> None:
        registration = self.select(ctx, registry)
        if registration is None:
            UNHANDLED_TOTAL.inc()
            logger.debug(f"No handler matched update {ctx.update.update_id}")
            return
        HANDLERS_TOTAL.labels(tier=registration.kind.value).inc()
        await self.envelope.run(ctx, registration.callback)
