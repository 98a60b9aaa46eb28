"""Middleware chain executed around handler dispatch.

A middleware is an async callable ``(ctx, next)``. It runs in registration
order and decides whether the update goes further by awaiting ``next()``.
Not awaiting it stops the chain: no later middleware and no handler runs,
and nothing is reported as an error. Work placed after ``await next()`` runs
once everything downstream has finished.

Exceptions raised by a middleware are not caught here. Only the final
handler invocation is wrapped by the error envelope.
"""
import logging
import time
from typing import Awaitable, Callable

from webhook_bot.context import Context

logger = logging.getLogger(__name__)

Next = Callable[[], Awaitable[None]]
Middleware = Callable[[Context, Next], Awaitable[None]]
FinalStage = Callable[[Context], Awaitable[None]]


class MiddlewareChain:
    """Append-only ordered list of middleware."""

    def __init__(self) -> None:
        self._middlewares: list[Middleware] = []
        self._frozen = False

    def use(self, middleware: Middleware) -> None:
        if self._frozen:
            raise RuntimeError("Cannot add middleware after dispatch has started")
        self._middlewares.append(middleware)

    def freeze(self) -> None:
        self._frozen = True

    def __len__(self) -> int:
        return len(self._middlewares)

    async def run(self, ctx: Context, final_stage: FinalStage) -> None:
        """Run every middleware in order, then ``final_stage`` at most once."""
        middlewares = tuple(self._middlewares)

        async def call(index: int) -> None:
            if index == len(middlewares):
                await final_stage(ctx)
                return

            called = False

            async def next_() -> None:
                nonlocal called
                if called:
                    raise RuntimeError("next() called multiple times")
                called = True
                await call(index + 1)

            await middlewares[index](ctx, next_)

        await call(0)


async def log_updates(ctx: Context, next: Next) -> None:
    """Log every update with its kinds and how long processing took."""
    start_time = time.monotonic()
    try:
        await next()
    finally:
        elapsed_ms = (time.monotonic() - start_time) * 1000
        kinds = ",".join(sorted(kind.value for kind in ctx.kinds)) or "unknown"
        logger.info(
            f"Update {ctx.update.update_id} [{kinds}] from chat {ctx.chat_id} "
            f"processed in {elapsed_ms:.0f}ms"
        )
