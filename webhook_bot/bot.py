"""Telegram bot: middleware pipeline and handler dispatch for webhook updates.

Architecture overview:
  Telegram Cloud  ──webhook POST──►  FastAPI (main.py)
                                        │  secret check, JSON parse,
                                        │  parse_update() tags event kinds
                                        ▼
                                  TelegramBot.process_update()   (background)
                                        │
                                        ▼
                                  Context.derive()
                                        │
                                        ▼
                         MiddlewareChain.run()  ── short-circuit? stop
                                        │
                                        ▼
                         Dispatcher.dispatch()   command > text > event
                                        │
                                        ▼
                         ErrorEnvelope.run()  ── failure? log + notify user

Key design decisions:
  - The bot is built once at startup (FastAPI lifespan) and frozen before the
    first update arrives. Registries and the middleware chain are read-only
    afterwards, so concurrent updates share no mutable state.
  - Admin-only handlers are merged per request, in front of the base set,
    only when the update comes from the admin chat. Other chats sending an
    admin-only command get an access-denied reply.
  - Middleware errors propagate to the caller; handler errors never do.
"""
import logging
from typing import Any, Iterable

from webhook_bot.admin import deny_access, is_admin
from webhook_bot.api import TelegramApi
from webhook_bot.context import Context
from webhook_bot.dispatch import Dispatcher, HandlerRegistry, Registration
from webhook_bot.errors import ErrorEnvelope, HandlerCallback
from webhook_bot.metrics import UPDATE_LATENCY, UPDATES_TOTAL
from webhook_bot.middleware import Middleware, MiddlewareChain
from webhook_bot.updates import EventKind, IncomingUpdate, parse_update

logger = logging.getLogger(__name__)

WEBHOOK_SUFFIX = "/webhook"


class TelegramBot:
    """Routes webhook updates through middleware to a single handler."""

    def __init__(
        self,
        api: TelegramApi,
        handlers: Iterable[Registration] = (),
        admin_handlers: Iterable[Registration] = (),
        admin_id: int | None = None,
        error_logger: logging.Logger | None = None,
    ):
        """Initialize the bot.

        Args:
            api: Outbound Bot API client.
            handlers: Base registrations, searched for every update.
            admin_handlers: Registrations only active for the admin chat.
            admin_id: Chat id of the administrator.
            error_logger: Logger the error envelope reports handler failures to.
        """
        self.api = api
        self.admin_id = admin_id
        self.registry = HandlerRegistry(handlers)
        self.admin_registry = HandlerRegistry(admin_handlers)
        self.middleware = MiddlewareChain()
        self.dispatcher = Dispatcher(ErrorEnvelope(error_logger))
        self._admin_view: HandlerRegistry | None = None

    # ------------------------------------------------------------------
    # Registration (startup only)
    # ------------------------------------------------------------------

    def use(self, middleware: Middleware) -> None:
        self.middleware.use(middleware)

    def command(self, trigger: str, callback: HandlerCallback) -> Registration:
        return self.registry.command(trigger, callback)

    def start(self, callback: HandlerCallback) -> Registration:
        return self.command("start", callback)

    def help(self, callback: HandlerCallback) -> Registration:
        return self.command("help", callback)

    def text(self, trigger: str, callback: HandlerCallback) -> Registration:
        return self.registry.text(trigger, callback)

    def event(self, trigger: str | EventKind, callback: HandlerCallback) -> Registration:
        return self.registry.event(trigger, callback)

    def freeze(self) -> None:
        """Lock registrations; called once before serving traffic."""
        self.registry.freeze()
        self.admin_registry.freeze()
        self.middleware.freeze()
        self._admin_view = self.registry.prepend(self.admin_registry)

    @property
    def frozen(self) -> bool:
        return self.registry.frozen

    # ------------------------------------------------------------------
    # Update processing
    # ------------------------------------------------------------------

    def parse_update(self, data: dict[str, Any]) -> IncomingUpdate:
        return parse_update(data, self.api.bot)

    def handlers_for(self, ctx: Context) -> HandlerRegistry:
        """Active handler set for one update.

        Admin handlers are searched first, so an admin registration wins a
        trigger tie with a base registration.
        """
        if self.admin_registry and is_admin(ctx, self.admin_id):
            if self._admin_view is None:
                return self.registry.prepend(self.admin_registry)
            return self._admin_view
        return self.registry

    def is_admin_only(self, ctx: Context) -> bool:
        """True if a non-admin sent a command only the admin set handles."""
        token = ctx.command
        if token is None or is_admin(ctx, self.admin_id):
            return False
        return (
            self.admin_registry.find_command(token) is not None
            and self.registry.find_command(token) is None
        )

    async def _dispatch(self, ctx: Context) -> None:
        if self.is_admin_only(ctx):
            await self.dispatcher.envelope.run(ctx, deny_access)
            return
        await self.dispatcher.dispatch(ctx, self.handlers_for(ctx))

    async def process_update(self, incoming: IncomingUpdate) -> None:
        """Run one update through the middleware chain and dispatch it.

        Handler failures are contained by the error envelope. Middleware
        failures propagate to the caller.
        """
        if not self.frozen:
            self.freeze()
        ctx = Context.derive(incoming, self.api)
        for kind in incoming.kinds:
            UPDATES_TOTAL.labels(kind=kind.value).inc()

        with UPDATE_LATENCY.time():
            await self.middleware.run(ctx, self._dispatch)

    # ------------------------------------------------------------------
    # Webhook registration
    # ------------------------------------------------------------------

    async def register_webhook(
        self,
        base_url: str | None = None,
        suffix: str = WEBHOOK_SUFFIX,
        secret: str | None = None,
    ) -> bool:
        """Point Telegram at ``base_url + suffix``; no URL unregisters."""
        webhook_url = f"{base_url.rstrip('/')}{suffix}" if base_url else ""
        logger.info(f"Registering webhook: {webhook_url or '<none>'}")
        return await self.api.set_webhook(webhook_url, secret_token=secret)
