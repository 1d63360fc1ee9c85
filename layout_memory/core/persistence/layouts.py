"""Layout persistence store.

On disk the mapping is a flat list of records so that the two key shapes
stay unambiguous::

    {"layouts": [
        {"root": "/p1", "branch": null, "snapshot": {...}, "files": ["/p1/a.txt", null]},
        {"root": "/p1", "branch": "dev", "snapshot": {...}, "files": ["/p1/c.txt"]}
    ]}
"""

from __future__ import annotations

from typing import Mapping

from ._base import JsonStore
from ..errors import PersistenceFailure
from ..log import logger
from ..models import BranchKey, Entry, Key, ProjectKey


def encode_record(key: Key, entry: Entry) -> dict:
    """Turn one key/entry pair into its JSON record."""
    if isinstance(key, BranchKey):
        branch: str | None = key.branch
    elif isinstance(key, ProjectKey):
        branch = None
    else:
        raise TypeError(f"Not a layout key: {key!r}")
    return {
        "root": key.root,
        "branch": branch,
        "snapshot": entry.snapshot,
        "files": list(entry.files),
    }


def decode_record(record: dict) -> tuple[Key, Entry]:
    """Inverse of :func:`encode_record`.  Raises ``ValueError`` on bad input."""
    if not isinstance(record, dict):
        raise ValueError(f"layout record is not an object: {record!r}")
    root = record.get("root")
    if not isinstance(root, str) or not root:
        raise ValueError(f"layout record has no root: {record!r}")
    branch = record.get("branch")
    files = record.get("files") or []
    if not isinstance(files, list):
        raise ValueError(f"layout record files is not a list: {record!r}")
    key: Key = BranchKey(root, str(branch)) if branch else ProjectKey(root)
    entry = Entry.build(
        record.get("snapshot"),
        (str(path) if path else None for path in files),
    )
    return key, entry


class LayoutFileStore(JsonStore):
    """Durable mirror for :class:`ConfigStore` (``{"layouts": [record, ...]}``)."""

    def load_all(self) -> dict[Key, Entry]:
        """Load every saved layout, skipping records that fail to decode."""
        records = self.load_raw().get("layouts")
        if not isinstance(records, list):
            records = []
        layouts: dict[Key, Entry] = {}
        for record in records:
            try:
                key, entry = decode_record(record)
            except ValueError:
                logger.debug("skipping bad layout record in %s", self.path, exc_info=True)
                continue
            layouts[key] = entry
        return layouts

    def save_all(self, layouts: Mapping[Key, Entry]) -> None:
        """Replace the file with *layouts*.

        Raises:
            PersistenceFailure: if the mapping could not be serialised or written.
        """
        records = [encode_record(key, entry) for key, entry in layouts.items()]
        try:
            self.save_raw({"layouts": records})
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceFailure(
                f"Could not write layouts to {self.path}: {exc}"
            ) from exc
