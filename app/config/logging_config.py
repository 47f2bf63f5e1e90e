"""
Configure logging for the relay.

Every module logs through the single application logger named
``LOGGER_NAME``. ``configure_logging()`` attaches a stdout handler and, when
the log directory is writable, a size-rotated file handler to it. The chatty
loggers of the Twilio SDK and the websockets library are capped at WARNING so
per-frame and per-request noise stays out of call logs.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from app.config.constants import LOGGER_NAME

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_DIR = Path("logs")
LOG_FILE_NAME = "twilio_relay.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

# Third-party loggers that log every HTTP request or WebSocket frame at INFO/DEBUG
NOISY_LOGGERS = ("twilio.http_client", "websockets.client", "websockets.server")


def _file_handler(log_dir: Path, formatter: logging.Formatter) -> RotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME, maxBytes=MAX_LOG_SIZE, backupCount=BACKUP_COUNT
    )
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: Optional[str] = None, log_dir: Union[str, Path, None] = LOG_DIR
) -> logging.Logger:
    """
    Configure the application logger.

    Calling it again replaces the handlers instead of stacking new ones.

    Args:
        level: Level name; defaults to the LOG_LEVEL environment variable
        log_dir: Folder for the rotating log file, or None for console only

    Returns:
        logging.Logger: The configured application logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir is not None:
        try:
            logger.addHandler(_file_handler(Path(log_dir), formatter))
        except OSError as e:
            logger.warning(f"Could not set up file logging: {e}")

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Keep relay logs out of uvicorn's root handlers
    logger.propagate = False

    logger.debug("Logging configured")
    return logger
