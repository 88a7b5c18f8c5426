"""Logging setup shared by the CLI and library callers."""

import logging
import sys
from typing import Optional, TextIO

from solana_team_supply.config import DEFAULT_LOG_FORMAT

# Libraries whose INFO chatter would drown out per-wallet progress
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def configure_logging(log_level: str = "INFO", log_format: Optional[str] = None, stream: TextIO = None):
    """Install a root handler at ``log_level``.

    Unknown level names fall back to INFO. The CLI passes ``sys.stderr`` as
    ``stream`` so that stdout carries only the JSON result.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format=log_format or DEFAULT_LOG_FORMAT,
        stream=stream or sys.stdout
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def short_address(address: str) -> str:
    """Abbreviate an address for log lines."""
    return f"{address[:8]}..."
