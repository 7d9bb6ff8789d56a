"""Structured logging for the marketplace.

Every module logs through ``structlog.get_logger(__name__)``. Output is
JSON under ``production``/``staging`` and a coloured console otherwise;
``PROTEAN_ENV=test`` quiets everything below WARNING. Request-scoped
values (path, actor) are bound with ``add_context`` and ride along on
every line until ``clear_context``.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

# Payment proof values that must never reach a log line
_MASKED_KEYS = {"trx_id", "account_number", "transaction_reference"}

_NOISY_LOGGERS = ("protean", "asyncio", "httpx", "urllib3")


def _environment() -> str:
    return (os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower()


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", _LEVELS.get(_environment(), "INFO"))


def mask_payment_fields(_logger, _method_name, event_dict: dict) -> dict:
    for key in _MASKED_KEYS.intersection(event_dict):
        value = str(event_dict[key] or "")
        event_dict[key] = f"***{value[-4:]}" if len(value) > 4 else "***"
    return event_dict


def _handlers(level: str) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    handlers: list[logging.Handler] = [console]

    # Files only when a directory is configured; containers log to stdout
    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            filename=path / "marketplace.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        handlers.append(rotating)

    for handler in handlers:
        handler.setLevel(level)
    return handlers


def setup_stdlib_logging() -> None:
    level = get_log_level()
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = _handlers(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer():
    if _environment() in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=3),
    )


def setup_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            mask_payment_fields,
            structlog.processors.format_exc_info,
            _renderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    setup_stdlib_logging()
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
