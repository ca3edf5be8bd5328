"""Logging setup."""

import logging
import sys

from journal.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging():
    """Configure the root logger from TJ_LOG_LEVEL."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout, force=True)

    # Per-request and per-frame chatter
    for name in ("httpx", "httpcore", "websockets"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
