"""Handler tables.

``HANDLERS`` is registered for every chat. ``admin_handlers()`` is merged in
front of it for updates coming from the admin chat.
"""
from webhook_bot.dispatch import Registration, command, event, text
from webhook_bot.handlers.admin import info, stats
from webhook_bot.handlers.basic import help_command, hi, start, sticker
from webhook_bot.handlers.echo import echo
from webhook_bot.updates import EventKind

HANDLERS: list[Registration] = [
    command("start", start),
    command("help", help_command),
    command("echo", echo),
    text("hi", hi),
    event(EventKind.STICKER, sticker),
]


def admin_handlers() -> list[Registration]:
    return [
        command("info", info),
        command("stats", stats),
    ]


__all__ = ["HANDLERS", "admin_handlers"]
