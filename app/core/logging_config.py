"""Root logger setup with a per-request id."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="SYSTEM")

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] [Req: %(request_id)s] - %(message)s"


class RequestIdFilter(logging.Filter):
    """Injects the current request id into the log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        return True


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure the root logger with a console handler and an optional rotating file."""
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5))

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    # Drop handlers from a previous call (app reload)
    root_logger.handlers = []
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RequestIdFilter())
        root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
