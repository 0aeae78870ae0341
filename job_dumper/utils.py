"""Utility helpers shared across the dumper."""

from __future__ import annotations

import logging
import sys
from typing import Optional
from urllib.parse import unquote_plus


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a configured logger instance.

    The handler lives on the top-level package logger so module loggers
    (`job_dumper.pipeline`, ...) share it instead of printing twice.
    """
    logger = logging.getLogger(name)
    package_logger = logging.getLogger(name.split(".")[0])
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.INFO)
    if level is not None:
        logger.setLevel(level)
    return logger


def configure_logging(verbose: bool = False) -> None:
    """Set the level for every logger under the package."""
    level = logging.DEBUG if verbose else logging.INFO
    get_logger("job_dumper", level)


def decode_keyword(keyword: str) -> str:
    """URL-decode a configured keyword (`%23DevDiv` -> `#DevDiv`)."""
    return unquote_plus(keyword.strip())


def cache_name(keyword: str) -> str:
    """Decoded keyword with quotes removed, used to name cache files."""
    return decode_keyword(keyword).replace('"', "")
