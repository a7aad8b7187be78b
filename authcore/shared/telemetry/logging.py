"""Logging setup for the authcore package logger.

Modules log through logging.getLogger(__name__). Nothing here touches the
root logger; the host application keeps control of its own handlers.
"""

import logging
import sys

from authcore.core.config import Settings, get_settings

PACKAGE_LOGGER = "authcore"
HANDLER_NAME = "authcore.stdout"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """Send authcore records to stdout.

    Level is DEBUG when settings.debug is True, otherwise INFO. Repeated
    calls update the level and never add a second handler.
    """
    settings = settings or get_settings()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
