import logging
import os

from pythonjsonlogger.json import JsonFormatter


def setup_logging(level: str | None = None) -> None:
    """Configure structured JSON logging on the root logger."""
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    handler = logging.StreamHandler()
    formatter = JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers = [handler]
