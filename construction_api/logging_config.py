"""
Root logger setup.

Logs go to the console and, when a log file is configured, to a file that
rolls over at midnight.  Rolled files keep the date as a suffix
(``construction-api.log.2024-05-01``) and the last ``backup_days`` are kept.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def daily_file_handler(logfile: str, backup_days: int = 31) -> TimedRotatingFileHandler:
    path = Path(logfile).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return TimedRotatingFileHandler(path, when="midnight", backupCount=backup_days, encoding="utf-8")


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    root = logging.getLogger()
    # Already configured (repeated create_app calls, or a test runner's handlers).
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(daily_file_handler(logfile))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
