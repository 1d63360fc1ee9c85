"""Bulk removal of saved layouts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Protocol

from . import keys
from .layout_store import ConfigStore
from .log import logger
from .models import Key


class ProjectResolver(Protocol):
    def resolve_root(self, user_input: str) -> str: ...

    def is_known_project(self, path: str) -> bool: ...


@dataclass
class PruneReport:
    """What a prune removed.  ``root`` is ``None`` for dead-project cleanup."""

    root: str | None
    removed: set[Key] = field(default_factory=set)

    @property
    def count(self) -> int:
        return len(self.removed)

    def describe_removed(self) -> list[str]:
        return sorted(key.describe() for key in self.removed)


class Pruner:
    """Resolve a project identifier, build a predicate, remove matching keys."""

    def __init__(self, store: ConfigStore, projects: ProjectResolver) -> None:
        self._store = store
        self._projects = projects

    def prune_branches(self, identifier: str) -> PruneReport:
        """Drop every branch layout of a project, keeping its project layout.

        Raises:
            ProjectNotFound: if *identifier* does not resolve.
        """
        root = self._projects.resolve_root(identifier)
        return self._prune(root, keys.branches_of(root))

    def prune_project(self, identifier: str) -> PruneReport:
        """Drop every layout of a project.

        Raises:
            ProjectNotFound: if *identifier* does not resolve.
        """
        root = self._projects.resolve_root(identifier)
        return self._prune(root, keys.all_of(root))

    def prune_dead(self) -> PruneReport:
        """Drop layouts of projects that no longer exist."""
        return self._prune(None, keys.dead_projects(self._projects.is_known_project))

    def _prune(self, root: str | None, predicate: Callable[[Key], bool]) -> PruneReport:
        removed = self._store.remove_all(predicate)
        logger.debug("pruned %d layout(s) for %s", len(removed), root or "dead projects")
        return PruneReport(root=root, removed=removed)
