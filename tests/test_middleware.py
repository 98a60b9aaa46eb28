import logging
from unittest.mock import AsyncMock

import pytest

from webhook_bot.dispatch import Dispatcher, HandlerRegistry, command, event, text
from webhook_bot.errors import ErrorEnvelope
from webhook_bot.middleware import MiddlewareChain, log_updates


def recording(name, calls):
    async def middleware(ctx, next):
        calls.append(f"{name}:before")
        await next()
        calls.append(f"{name}:after")

    return middleware


@pytest.mark.asyncio
async def test_chain_runs_in_registration_order_with_wrap_semantics(make_context, make_update):
    calls = []
    chain = MiddlewareChain()
    chain.use(recording("a", calls))
    chain.use(recording("b", calls))

    async def final(ctx):
        calls.append("handler")

    await chain.run(make_context(make_update()), final)

    assert calls == ["a:before", "b:before", "handler", "b:after", "a:after"]


@pytest.mark.asyncio
async def test_final_stage_runs_immediately_without_middleware(make_context, make_update):
    final = AsyncMock()
    ctx = make_context(make_update())
    await MiddlewareChain().run(ctx, final)
    final.assert_awaited_once_with(ctx)


@pytest.mark.asyncio
async def test_short_circuit_blocks_every_handler(make_context, make_update, sticker, caplog):
    handler = AsyncMock()
    registry = HandlerRegistry(
        [command("start", handler), text("hi", handler), event("sticker", handler)]
    )
    dispatcher = Dispatcher(ErrorEnvelope())
    later = AsyncMock()

    async def stop(ctx, next):
        return None

    chain = MiddlewareChain()
    chain.use(stop)
    chain.use(later)

    updates = [
        make_update(text="/start"),
        make_update(text="hi"),
        make_update(text=None, sticker=sticker),
    ]
    with caplog.at_level(logging.ERROR):
        for data in updates:
            await chain.run(make_context(data), lambda ctx: dispatcher.dispatch(ctx, registry))

    handler.assert_not_awaited()
    later.assert_not_awaited()
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


@pytest.mark.asyncio
async def test_middleware_exception_propagates(make_context, make_update):
    final = AsyncMock()

    async def broken(ctx, next):
        raise KeyError("boom")

    chain = MiddlewareChain()
    chain.use(broken)
    with pytest.raises(KeyError):
        await chain.run(make_context(make_update()), final)
    final.assert_not_awaited()


@pytest.mark.asyncio
async def test_calling_next_twice_raises(make_context, make_update):
    final = AsyncMock()

    async def twice(ctx, next):
        await next()
        await next()

    chain = MiddlewareChain()
    chain.use(twice)
    with pytest.raises(RuntimeError, match="multiple times"):
        await chain.run(make_context(make_update()), final)
    final.assert_awaited_once()


def test_frozen_chain_is_append_only():
    chain = MiddlewareChain()
    chain.use(AsyncMock())
    chain.freeze()
    with pytest.raises(RuntimeError):
        chain.use(AsyncMock())
    assert len(chain) == 1


@pytest.mark.asyncio
async def test_log_updates_logs_and_continues(make_context, make_update, caplog):
    next_ = AsyncMock()
    with caplog.at_level(logging.INFO, logger="webhook_bot.middleware"):
        await log_updates(make_context(make_update(chat_id=31)), next_)
    next_.assert_awaited_once()
    assert "from chat 31" in caplog.text
    assert "message,text" in caplog.text


@pytest.mark.asyncio
async def test_log_updates_logs_even_when_downstream_fails(make_context, make_update, caplog):
    next_ = AsyncMock(side_effect=RuntimeError("downstream"))
    with caplog.at_level(logging.INFO, logger="webhook_bot.middleware"):
        with pytest.raises(RuntimeError):
            await log_updates(make_context(make_update()), next_)
    assert "processed in" in caplog.text
