"""Admin-only handlers.

These are only reachable when the update comes from the admin chat; see
``TelegramBot.handlers_for``.
"""
import json
import logging
from datetime import datetime, timezone

from webhook_bot.api import TelegramApiError
from webhook_bot.context import Context

logger = logging.getLogger(__name__)


async def info(ctx: Context):
    """Handle /info - show the bot's own account as returned by getMe."""
    try:
        bot_info = await ctx.api.get_me()
    except TelegramApiError as e:
        logger.warning(f"getMe failed for /info: {e}")
        await ctx.reply("❌ Failed to retrieve bot information.")
        return
    formatted = json.dumps(bot_info.to_dict(), indent=2, ensure_ascii=False)
    await ctx.reply_with_markdown(f"Bot Information:\n```json\n{formatted}\n```")


async def stats(ctx: Context):
    """Handle /stats - dump what the bot knows about the current chat."""
    user = ctx.user
    payload = {
        "chatId": ctx.chat_id,
        "isPrivate": ctx.is_private_chat,
        "isGroup": ctx.is_group_chat,
        "user": (user.first_name if user else None) or "Unknown",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    formatted = json.dumps(payload, indent=2, ensure_ascii=False)
    await ctx.reply_with_markdown(f"*Admin Stats:*\n```json\n{formatted}\n```")
