"""
Logging setup — one RichHandler on the root logger.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route all log records through rich at the given level."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        log_time_format="[%Y-%m-%d %H:%M:%S]",
    )
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        handlers=[handler],
        force=True,
    )
    # httpx request lines carry the bot token in the URL
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
