"""Error envelope around the final handler invocation."""
import inspect
import logging
from typing import Awaitable, Callable

from webhook_bot.context import Context
from webhook_bot.metrics import HANDLER_ERRORS

GENERIC_ERROR_MESSAGE = "❌ Sorry, something went wrong. Please try again later."

HandlerCallback = Callable[[Context], Awaitable[None] | None]


class ErrorEnvelope:
    """Runs a handler and contains any failure it raises.

    A failing handler is logged with the originating chat id, and the user
    gets exactly one generic notice. If sending the notice fails too, that is
    logged and dropped. Nothing is re-raised.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    async def run(self, ctx: Context, callback: HandlerCallback) -> None:
        try:
            result = callback(ctx)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            HANDLER_ERRORS.labels(stage="handler").inc()
            self.logger.error(
                f"Error handling update for chat {ctx.chat_id}: {e}", exc_info=True
            )
            await self._notify(ctx)

    async def _notify(self, ctx: Context) -> None:
        try:
            await ctx.reply(GENERIC_ERROR_MESSAGE)
        except Exception as e:
            HANDLER_ERRORS.labels(stage="notify").inc()
            self.logger.error(
                f"Failed to send error message to chat {ctx.chat_id}: {e}",
                exc_info=True,
            )
