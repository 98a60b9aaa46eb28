"""Handlers available to every chat."""
from webhook_bot.context import Context

HELP_TEXT = """🤖 *Bot Commands:*

/start - Start the bot
/help - Show this help message
/echo <text> - Echo your message back

💬 *Text Commands:*
• Send "hi" to get a greeting

🎨 *Features:*
• Send a sticker and I'll respond
• Admin-only commands available for authorized users

Need more help? Contact the bot administrator."""


async def start(ctx: Context):
    """Handle /start."""
    await ctx.reply(f"{ctx.chat_id} I'm started! check /help")


async def help_command(ctx: Context):
    """Handle /help - show the command list."""
    await ctx.reply_with_markdown(HELP_TEXT)


async def hi(ctx: Context):
    await ctx.reply("Hey there")


async def sticker(ctx: Context):
    await ctx.reply("👍")
