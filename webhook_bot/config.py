"""Environment configuration, resolved once at startup."""
import os
from dataclasses import dataclass
from typing import Mapping

_REQUIRED_ENV = ("TELEGRAM_BOT_TOKEN", "WEBHOOK_SECRET")
_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_admin_id(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"ADMIN_CHAT_ID must be an integer chat id, got: {value!r}") from None


@dataclass(frozen=True)
class Settings:
    bot_token: str = ""
    webhook_secret: str = ""
    admin_chat_id: int | None = None
    # Reject every chat except the admin's before any handler runs.
    restrict_to_admin: bool = False
    app_env: str = "production"
    log_level: str = "INFO"
    port: int = 8080

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            bot_token=env.get("TELEGRAM_BOT_TOKEN", ""),
            webhook_secret=env.get("WEBHOOK_SECRET", ""),
            admin_chat_id=_parse_admin_id(env.get("ADMIN_CHAT_ID")),
            restrict_to_admin=env.get("RESTRICT_TO_ADMIN", "").lower() in _TRUE_VALUES,
            app_env=env.get("APP_ENV", "production").lower(),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            port=int(env.get("PORT", 8080)),
        )

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    def missing(self) -> list[str]:
        """Names of required variables that are unset."""
        values = {
            "TELEGRAM_BOT_TOKEN": self.bot_token,
            "WEBHOOK_SECRET": self.webhook_secret,
        }
        return [key for key in _REQUIRED_ENV if not values[key]]
