"""
Logging setup for the API process.
"""

from __future__ import annotations

import logging

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(level or config.log_level())

    # Lifespan can run more than once per process (test clients, reloads).
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger(__name__).info(
        "logging_configured level=%s", logging.getLevelName(root_logger.level)
    )
