"""Input validation utilities for bot handlers."""
from webhook_bot.context import Context

TELEGRAM_MAX_MESSAGE_LENGTH = 4096


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


def validate_command_args(ctx: Context, required_args: int = 0) -> list[str]:
    """Validate that a command message carries enough arguments.

    Args:
        ctx: Context of the update being handled
        required_args: Minimum number of arguments after the command token

    Returns:
        The command arguments

    Raises:
        ValidationError: If there is no text message or too few arguments
    """
    if ctx.text is None:
        raise ValidationError("No text message found")

    args = ctx.args
    if len(args) < required_args:
        raise ValidationError(
            f"Command requires at least {required_args} argument(s), but got {len(args)}"
        )

    return args


def validate_text_length(text: str, max_length: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> str:
    """Validate text length.

    Args:
        text: Text to validate
        max_length: Maximum allowed number of characters

    Returns:
        The text unchanged

    Raises:
        ValidationError: If the text is longer than max_length
    """
    if len(text) > max_length:
        raise ValidationError(f"Text too long. Maximum {max_length} characters allowed.")
    return text


def command_text(ctx: Context) -> str:
    """Everything after the command token, joined back with single spaces."""
    return " ".join(ctx.args)
