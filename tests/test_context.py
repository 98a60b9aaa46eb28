import pytest

from webhook_bot.context import Context
from webhook_bot.updates import parse_update


def test_projections_from_private_message(make_context, make_update):
    ctx = make_context(make_update(text="hello", chat_id=42))
    assert ctx.message is not None
    assert ctx.chat_id == 42
    assert ctx.user.id == 42
    assert ctx.user.first_name == "Test"
    assert ctx.is_private_chat is True
    assert ctx.is_group_chat is False
    assert ctx.text == "hello"


@pytest.mark.parametrize("chat_type", ["group", "supergroup"])
def test_group_chat_flags(make_context, make_update, chat_type):
    ctx = make_context(make_update(chat_id=-100, chat_type=chat_type))
    assert ctx.is_group_chat is True
    assert ctx.is_private_chat is False


@pytest.mark.parametrize(
    "field", ["message", "edited_message", "channel_post", "edited_channel_post"]
)
def test_message_resolved_from_any_message_field(make_context, make_update, field):
    ctx = make_context(make_update(text="x", field=field))
    assert ctx.message is not None
    assert ctx.text == "x"


def test_message_field_takes_precedence(make_context, make_update):
    data = make_update(text="first")
    data["edited_message"] = dict(data["message"], text="second")
    ctx = make_context(data)
    assert ctx.text == "first"


def test_update_without_message(make_context):
    data = {
        "update_id": 9,
        "inline_query": {
            "id": "1",
            "from": {"id": 7, "is_bot": False, "first_name": "A"},
            "query": "q",
            "offset": "",
        },
    }
    ctx = make_context(data)
    assert ctx.message is None
    assert ctx.chat_id is None
    assert ctx.user is None
    assert ctx.is_private_chat is False
    assert ctx.is_group_chat is False
    assert ctx.text is None
    assert ctx.command is None


def test_command_and_args(make_context, make_update):
    ctx = make_context(make_update(text="/Echo hello world"))
    assert ctx.command == "echo"
    assert ctx.args == ["hello", "world"]


def test_plain_text_has_no_command(make_context, make_update):
    ctx = make_context(make_update(text="hello /echo"))
    assert ctx.command is None
    assert ctx.args == []


def test_deriving_twice_is_identical(api, make_update):
    incoming = parse_update(make_update(text="/start now", chat_type="group"))
    first = Context.derive(incoming, api)
    second = Context.derive(incoming, api)
    for name in ("chat_id", "text", "command", "args", "is_private_chat", "is_group_chat"):
        assert getattr(first, name) == getattr(second, name)
    assert first.user == second.user
    assert first.message is second.message
    assert incoming.update.message.text == "/start now"


@pytest.mark.asyncio
async def test_reply_sends_to_originating_chat(make_context, make_update, api):
    ctx = make_context(make_update(chat_id=55))
    await ctx.reply("pong", disable_notification=True)
    api.send_message.assert_awaited_once_with(55, "pong", disable_notification=True)


@pytest.mark.asyncio
async def test_reply_with_markdown_sets_parse_mode(make_context, make_update, api):
    ctx = make_context(make_update(chat_id=55))
    await ctx.reply_with_markdown("*bold*")
    assert api.send_message.await_args.kwargs["parse_mode"] == "Markdown"


@pytest.mark.asyncio
async def test_reply_without_chat_raises(make_context, api):
    ctx = make_context({"update_id": 1})
    with pytest.raises(ValueError, match="chat ID"):
        await ctx.reply("hello")
    api.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_reply_with_blank_text_raises(make_context, make_update):
    ctx = make_context(make_update())
    with pytest.raises(ValueError, match="empty"):
        await ctx.reply("   ")
