from __future__ import annotations

import logging
import sys
from typing import Optional


_LEVELS_BY_VERBOSE = {
    0: logging.WARNING,
    1: logging.INFO,     # series start/completion
    2: logging.DEBUG,    # every roll, bet and settlement
}


def setup_logging(verbose_count: int = 0, logger_name: Optional[str] = None) -> logging.Logger:
    """
    Configure the root (or named) logger from a -v count and return it.

    Safe to call repeatedly; the stderr handler is attached once.
    """
    level = _LEVELS_BY_VERBOSE.get(verbose_count, logging.DEBUG)
    logger = logging.getLogger(logger_name or "")
    logger.setLevel(level)

    if not any(getattr(h, "_craps_engine_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler._craps_engine_handler = True  # type: ignore[attr-defined]
        fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%H:%M:%S"))
        logger.addHandler(handler)

    return logger
