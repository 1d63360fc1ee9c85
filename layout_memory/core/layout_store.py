"""In-memory layout table mirrored to durable storage."""

from __future__ import annotations

from typing import Callable, Iterable, Mapping, Protocol

from .errors import PersistenceFailure
from .log import logger
from .models import Entry, Key
from .keys import root_of


class DurableStore(Protocol):
    """Whole-mapping persistence used by :class:`ConfigStore`."""

    def load_all(self) -> Mapping[Key, Entry]: ...

    def save_all(self, layouts: Mapping[Key, Entry]) -> None: ...


class ConfigStore:
    """One saved :class:`Entry` per key, persisted after every mutation.

    A failed write never rolls back the in-memory table: the session keeps
    working with the new value and the failure is kept in
    ``last_persist_error`` (and logged) for the caller to report.
    """

    def __init__(self, durable: DurableStore | None = None) -> None:
        self._durable = durable
        self._layouts: dict[Key, Entry] = {}
        self.last_persist_error: PersistenceFailure | None = None

    @classmethod
    def open(cls, durable: DurableStore) -> ConfigStore:
        """Create a store pre-populated from *durable*."""
        store = cls(durable)
        store._layouts = dict(durable.load_all())
        logger.debug("loaded %d saved layout(s)", len(store._layouts))
        return store

    # -- queries --------------------------------------------------------------

    def get(self, key: Key) -> Entry | None:
        return self._layouts.get(key)

    def list_keys(self) -> list[Key]:
        return list(self._layouts)

    def projects(self) -> list[str]:
        """Distinct project roots that have at least one saved layout."""
        return sorted({root_of(key) for key in self._layouts})

    def __len__(self) -> int:
        return len(self._layouts)

    def __contains__(self, key: object) -> bool:
        return key in self._layouts

    # -- mutations ------------------------------------------------------------

    def put(self, key: Key, entry: Entry) -> bool:
        """Insert or overwrite *key*.  Returns ``False`` if persisting failed."""
        return self.put_many([(key, entry)])

    def put_many(self, items: Iterable[tuple[Key, Entry]]) -> bool:
        """Insert or overwrite several keys with a single write."""
        for key, entry in items:
            self._layouts[key] = entry
        return self._persist()

    def remove_all(self, predicate: Callable[[Key], bool]) -> set[Key]:
        """Remove every key matching *predicate* and persist once.

        Returns the removed keys.  Nothing is written when nothing matched.
        """
        removed = {key for key in self._layouts if predicate(key)}
        if not removed:
            return removed
        for key in removed:
            del self._layouts[key]
        self._persist()
        return removed

    def _persist(self) -> bool:
        if self._durable is None:
            return True
        try:
            self._durable.save_all(self._layouts)
        except PersistenceFailure as exc:
            logger.warning("layout store not saved: %s", exc, exc_info=True)
            self.last_persist_error = exc
            return False
        self.last_persist_error = None
        return True
