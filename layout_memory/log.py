"""Package-wide logger.

Modules import ``logger`` from here instead of calling ``logging.getLogger``
themselves so the CLI can attach a single handler for the whole package.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger("layout_memory")
logger.addHandler(logging.NullHandler())


def enable_file_logging(path: Path, level: int = logging.DEBUG) -> None:
    """Send package log records to *path* (used by ``--debug``)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.setLevel(level)
