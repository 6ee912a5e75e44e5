"""
Logging setup
Console plus rotating file output on the root logger, so the
core.*, analytics.* and api.* module loggers all end up in both.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5)


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach console and file handlers to the root logger.

    Calling it again does not duplicate handlers.

    Args:
        level: Level name, defaults to settings.LOG_LEVEL
        log_file: Log path, defaults to settings.LOG_FILE
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    path = Path(log_file or settings.LOG_FILE).resolve()

    root = logging.getLogger()
    root.setLevel(log_level)

    wanted = []
    if not any(getattr(h, "stream", None) is sys.stdout for h in root.handlers):
        wanted.append(logging.StreamHandler(sys.stdout))
    if not any(getattr(h, "baseFilename", None) == str(path) for h in root.handlers):
        wanted.append(_file_handler(path))

    for handler in wanted:
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    # uvicorn logs every request at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured (level=%s, file=%s)", logging.getLevelName(log_level), path)
    return logger
