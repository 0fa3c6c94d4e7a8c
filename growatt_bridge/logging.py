"""Logging setup for the growatt-bridge command line."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

AIOHTTP_LOGGERS = ("aiohttp.client", "aiohttp.access", "aiohttp.internal")


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Replace the root handlers with a console handler and an optional log file.

    Parameters
    ----------
    level:
        Level name from the ``[logging]`` section, e.g. "DEBUG" to see every
        queue grant and bridge round-trip.
    log_path:
        Append records to this file as well as the console. Its parent
        directory is created when missing.
    log_network:
        Leave the aiohttp loggers at the root level. Otherwise they are held at
        WARNING so portal traffic does not drown the command log.
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    network_level = logging.NOTSET if log_network else logging.WARNING
    for name in AIOHTTP_LOGGERS:
        logging.getLogger(name).setLevel(network_level)
