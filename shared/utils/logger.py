"""
Logging setup shared by the engine, the API and the CLI.

Every module calls ``setup_logger(__name__)``. Console output goes to
stderr so that CLI results on stdout stay machine-readable.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_DIR = Path("logs")
LOG_FILE_NAME = "validator_engine.log"


def _handlers(level: str) -> list:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    handlers = [console_handler]

    if settings.LOG_TO_FILE:
        LOG_DIR.mkdir(exist_ok=True)
        handlers.append(logging.FileHandler(LOG_DIR / LOG_FILE_NAME))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Setup a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__ of the module)
        level: Overrides LOG_LEVEL from settings

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    level = (level or settings.LOG_LEVEL).upper()

    # Handlers are attached once per logger name
    if not logger.handlers:
        for handler in _handlers(level):
            logger.addHandler(handler)
    logger.setLevel(level)

    return logger
