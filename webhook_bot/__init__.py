"""Telegram webhook bot: update dispatch and middleware pipeline."""
