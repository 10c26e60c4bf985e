"""
Logging utilities for the HTTP surface and the login CLI.

Provides a consistent logging format and an optional daily rotating log file.
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure root logging with a sensible default format."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(log_file, when="midnight", backupCount=7, encoding="utf-8")
        )

    logging.basicConfig(
        level=level.upper(),
        format=_FORMAT,
        handlers=handlers,
    )


__all__ = ["configure_logging"]
