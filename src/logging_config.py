# src/logging_config.py
#
# Centralized logging configuration for the application

import logging
import sys

from config.settings import LOG_LEVEL

_HANDLER_NAME = "crew-cascade-console"


# Configure root logger
def setup_logging(log_level: str = None):
    """
    Setup structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
                   Defaults to LOG_LEVEL from config.settings

    Calling it again only changes the level, the console handler is added once.
    """
    if log_level is None:
        log_level = LOG_LEVEL

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        return root_logger

    # Create formatter
    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Setup console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root_logger
