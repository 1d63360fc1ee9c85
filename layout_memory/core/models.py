"""Data model: composite keys and saved layout entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Union


@dataclass(frozen=True)
class ProjectKey:
    """Key for the project-wide layout of *root*."""

    root: str

    def describe(self) -> str:
        return self.root


@dataclass(frozen=True)
class BranchKey:
    """Key for the layout of *root* while *branch* is checked out."""

    root: str
    branch: str

    def describe(self) -> str:
        return f"{self.root} @ {self.branch}"


Key = Union[ProjectKey, BranchKey]


@dataclass(frozen=True)
class Entry:
    """A saved window configuration.

    ``snapshot`` belongs to whatever host produced it and is stored as-is.
    ``files`` keeps one slot per visible window; ``None`` marks a window
    with no backing file.
    """

    snapshot: Any
    files: tuple[str | None, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, snapshot: Any, files: Iterable[str | None]) -> Entry:
        return cls(snapshot=snapshot, files=tuple(files))

    @property
    def present_files(self) -> list[str]:
        """Paths that should be opened on restore, in saved order."""
        return [path for path in self.files if path]


@dataclass(frozen=True)
class Resolution:
    """Result of a successful load lookup."""

    key: Key
    entry: Entry
    is_fallback: bool = False
