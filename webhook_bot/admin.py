"""Admin gating.

``is_admin`` is the single predicate. It backs both the ``require_admin``
middleware and the request-scoped admin handler set in
:meth:`webhook_bot.bot.TelegramBot.handlers_for`. Anyone else who sends an
admin-only command gets ``ACCESS_DENIED_MESSAGE`` instead of silence.
"""
import logging

from webhook_bot.context import Context
from webhook_bot.middleware import Middleware, Next

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "❌ Access denied. This command is admin-only."


def is_admin(ctx: Context, admin_id: int | None) -> bool:
    """True iff the update's chat id equals ``admin_id``.

    No coercion: a string admin id never matches a numeric chat id. An
    unconfigured admin id (``None``) matches nothing.
    """
    if admin_id is None or ctx.chat_id is None:
        return False
    return ctx.chat_id == admin_id


async def deny_access(ctx: Context) -> None:
    logger.info(f"Access denied for chat {ctx.chat_id}")
    await ctx.reply(ACCESS_DENIED_MESSAGE)


def require_admin(admin_id: int | None) -> Middleware:
    """Middleware that stops the chain for anyone but the admin chat."""

    async def middleware(ctx: Context, next: Next) -> None:
        if is_admin(ctx, admin_id):
            await next()
            return
        await deny_access(ctx)

    return middleware
