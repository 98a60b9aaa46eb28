"""FastAPI entry point for the Telegram webhook.

Serve with ``uvicorn --factory webhook_bot.main:create_app`` or run this module
directly. Either way configuration and JSON logging come from the environment.
"""
import hmac
import logging
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from webhook_bot.admin import require_admin
from webhook_bot.api import TelegramApi, TelegramApiError
from webhook_bot.bot import WEBHOOK_SUFFIX, TelegramBot
from webhook_bot.config import Settings
from webhook_bot.handlers import HANDLERS, admin_handlers
from webhook_bot.logging_config import setup_logging
from webhook_bot.metrics import HANDLER_ERRORS
from webhook_bot.middleware import log_updates
from webhook_bot.updates import IncomingUpdate

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def build_bot(settings: Settings, api: TelegramApi) -> TelegramBot:
    """Wire middleware and handlers, then freeze the bot."""
    bot = TelegramBot(
        api=api,
        handlers=HANDLERS,
        admin_handlers=admin_handlers(),
        admin_id=settings.admin_chat_id,
    )
    bot.use(log_updates)
    if settings.restrict_to_admin:
        bot.use(require_admin(settings.admin_chat_id))
    bot.freeze()
    return bot


def check_settings(settings: Settings) -> None:
    missing = settings.missing()
    if not missing:
        return
    logger.error(f"Missing required environment variables: {missing}")
    if settings.is_production:
        raise RuntimeError("Missing required environment variables")


async def process_in_background(bot: TelegramBot, incoming: IncomingUpdate) -> None:
    """Top-level failure path for one update; the HTTP response is already sent."""
    try:
        await bot.process_update(incoming)
    except Exception as e:
        HANDLER_ERRORS.labels(stage="middleware").inc()
        logger.error(
            f"Error processing update {incoming.update_id}: {e}", exc_info=True
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic: the bot is built exactly once, before traffic arrives.
    settings: Settings = app.state.settings
    api = None
    if app.state.bot is None and settings.bot_token:
        api = TelegramApi(settings.bot_token)
        await api.initialize()
        app.state.bot = build_bot(settings, api)
        logger.info("Telegram bot initialized")
    elif app.state.bot is None:
        logger.warning("TELEGRAM_BOT_TOKEN not set - Telegram integration disabled")
    yield
    # Shutdown logic
    if api is not None:
        await api.shutdown()


def create_app(settings: Settings | None = None, bot: TelegramBot | None = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Resolved configuration. If omitted it is read from the
            environment and JSON logging is configured from it.
        bot: Pre-built bot, mainly for tests. Built in lifespan if omitted.
    """
    if settings is None:
        settings = Settings.from_env()
        setup_logging(settings.log_level)
    check_settings(settings)

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.bot = bot

    def get_bot(request: Request) -> TelegramBot:
        current = request.app.state.bot
        if current is None:
            raise HTTPException(status_code=503, detail="Telegram bot not configured")
        return current

    @app.post(WEBHOOK_SUFFIX)
    async def telegram_webhook(request: Request, background_tasks: BackgroundTasks):
        """Webhook endpoint for Telegram bot updates.

        Endpoint: POST /webhook
        """
        secret = request.app.state.settings.webhook_secret
        token = request.headers.get(SECRET_HEADER)
        if not secret or token is None or not hmac.compare_digest(token, secret):
            logger.error("Unauthorized: Invalid secret token.")
            return PlainTextResponse("Unauthorized", status_code=401)

        current = get_bot(request)
        try:
            body = await request.json()
            incoming = current.parse_update(body)
        except Exception as e:
            logger.error(f"Error processing webhook: {e}")
            return PlainTextResponse("Internal Server Error", status_code=500)

        background_tasks.add_task(process_in_background, current, incoming)
        return {"ok": True}

    @app.get("/registerWebhook")
    async def register_webhook(request: Request):
        """Register ``<scheme>://<host>/webhook`` with Telegram."""
        current = get_bot(request)
        base_url = f"{request.url.scheme}://{request.url.netloc}"
        return await _webhook_result(
            current.register_webhook(
                base_url,
                WEBHOOK_SUFFIX,
                request.app.state.settings.webhook_secret or None,
            )
        )

    @app.get("/unregisterWebhook")
    async def unregister_webhook(request: Request):
        current = get_bot(request)
        return await _webhook_result(current.register_webhook())

    @app.get("/")
    async def index():
        return PlainTextResponse("Hello from the Telegram webhook bot!")

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/healthz")
    async def healthz():
        """Basic health check."""
        return {"status": "ok"}

    return app


async def _webhook_result(pending) -> Response:
    try:
        ok = await pending
    except TelegramApiError as e:
        logger.error(f"Webhook registration failed: {e}")
        return JSONResponse(status_code=502, content={"ok": False, "error": str(e)})
    if ok:
        return PlainTextResponse("Ok")
    return JSONResponse(status_code=502, content={"ok": False})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "webhook_bot.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=Settings.from_env().port,
    )
