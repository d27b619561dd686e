import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List

from . import config


LOGGER_NAME = "e2remote"
_TRANSPORT_LOGGERS = ("urllib3", "urllib3.connectionpool")
_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _drop_handlers(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        try:
            h.close()
        except Exception:
            pass
    logger.handlers.clear()


def _build_handlers(level: int) -> List[logging.Handler]:
    """Rotating file handler plus stdout when console logging is on."""
    os.makedirs(os.path.dirname(config.LOG_FILE) or ".", exist_ok=True)
    fmt = logging.Formatter(_FORMAT)
    handlers: List[logging.Handler] = [
        RotatingFileHandler(config.LOG_FILE, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    ]
    if config.CONSOLE_LOG:
        handlers.append(logging.StreamHandler(sys.stdout))
    for h in handlers:
        h.setFormatter(fmt)
        h.setLevel(level)
    return handlers


def setup_logging() -> logging.Logger:
    """Configure the package logger from the current config, replacing old handlers."""
    level = logging.DEBUG if config.DEBUG else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    _drop_handlers(logger)

    handlers: List[logging.Handler] = _build_handlers(level) if config.LOG_ENABLED else [logging.NullHandler()]
    for h in handlers:
        logger.addHandler(h)

    # urllib3 logs every connection attempt at DEBUG; keep it at WARNING otherwise.
    transport_level = logging.CRITICAL
    if config.LOG_ENABLED:
        transport_level = logging.DEBUG if config.DEBUG else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        tl = logging.getLogger(name)
        tl.handlers.clear()
        tl.propagate = False
        tl.setLevel(transport_level)
        if config.LOG_ENABLED:
            for h in handlers:
                tl.addHandler(h)

    return logger


log = setup_logging()


def reload_logging() -> logging.Logger:
    """Reload logger level and handlers from current configuration."""
    return setup_logging()
