from webhook_bot.context import Context
from webhook_bot.validation import (
    ValidationError,
    command_text,
    validate_command_args,
    validate_text_length,
)

ECHO_MAX_LENGTH = 1000
ECHO_USAGE = "Please provide text to echo. Usage: /echo <your message>"


async def echo(ctx: Context):
    """Handle /echo <text> - repeat the arguments back to the user."""
    try:
        validate_command_args(ctx, required_args=1)
    except ValidationError:
        await ctx.reply(ECHO_USAGE)
        return

    text = command_text(ctx)
    try:
        validate_text_length(text, ECHO_MAX_LENGTH)
    except ValidationError as e:
        await ctx.reply(str(e))
        return

    await ctx.reply(f"You said: {text}")
