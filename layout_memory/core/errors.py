"""Error types for layout save/load/prune operations.

``InvalidKey`` and ``ProjectNotFound`` abort the command that triggered them.
``PersistenceFailure`` is raised by the durable store and downgraded to a
warning by :class:`~layout_memory.core.layout_store.ConfigStore`.
``PartialOpenFailure`` is a report, not something the coordinator raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class LayoutMemoryError(Exception):
    """Base class for all layout-memory errors."""


class InvalidKey(LayoutMemoryError, ValueError):
    """A key was requested for an empty project root."""


class ProjectNotFound(LayoutMemoryError, LookupError):
    """A user-supplied project identifier did not resolve to a project root."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"No project found for '{identifier}'")
        self.identifier = identifier


class PersistenceFailure(LayoutMemoryError, OSError):
    """Writing the layout store to disk failed."""


@dataclass
class PartialOpenFailure:
    """Files that could not be opened while restoring a layout."""

    failures: list[tuple[str, str]] = field(default_factory=list)

    def add(self, path: str, error: BaseException) -> None:
        self.failures.append((path, str(error) or type(error).__name__))

    @property
    def paths(self) -> list[str]:
        return [path for path, _ in self.failures]

    def __bool__(self) -> bool:
        return bool(self.failures)
