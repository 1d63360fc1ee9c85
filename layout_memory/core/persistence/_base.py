"""Atomic JSON document on disk."""

from __future__ import annotations

import json
import os
from pathlib import Path

from ..log import logger


class JsonStore:
    """One JSON object per file.

    Reads never raise: a missing, unreadable or malformed file reads as an
    empty object.  Writes replace the file in one rename, so a crash leaves
    either the previous document or the new one on disk.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load_raw(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.debug("unreadable store file %s", self.path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.debug("store file %s does not hold an object", self.path)
            return {}
        return data

    def save_raw(self, data: dict) -> None:
        """Serialise *data*, then swap it in through a sibling temp file.

        Serialisation errors (``TypeError``/``ValueError``) surface before
        the disk is touched; ``OSError`` from the write or rename propagates
        after the temp file is cleaned up.
        """
        text = json.dumps(data, indent=2, ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        try:
            tmp.write_text(text + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        finally:
            if tmp.exists():
                tmp.unlink()
