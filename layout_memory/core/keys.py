"""Pure-function key helpers.

Every function in this module is stateless: it builds keys, looks entries
up through whatever ``get`` callable it is given, or returns a predicate
over keys for :meth:`ConfigStore.remove_all`.
"""

from __future__ import annotations

from typing import Callable, Protocol

from .errors import InvalidKey
from .models import BranchKey, Entry, Key, ProjectKey, Resolution

KeyPredicate = Callable[[Key], bool]


class EntryLookup(Protocol):
    def get(self, key: Key) -> Entry | None: ...


def project_key(root: str) -> ProjectKey:
    """Return the project-wide key for *root*."""
    if not root:
        raise InvalidKey("Project root must not be empty")
    return ProjectKey(root)


def branch_key(root: str, branch: str | None) -> Key:
    """Return the key for *root* on *branch*.

    Without a branch (no version control, detached HEAD) this is the plain
    project key.
    """
    if not root:
        raise InvalidKey("Project root must not be empty")
    if not branch:
        return ProjectKey(root)
    return BranchKey(root, branch)


def resolve_for_load(
    store: EntryLookup, root: str, branch: str | None
) -> Resolution | None:
    """Find the entry to restore for *root* on *branch*.

    The branch entry wins; the project entry is the fallback.  Returns
    ``None`` when neither exists.
    """
    specific = branch_key(root, branch)
    entry = store.get(specific)
    if entry is not None:
        return Resolution(key=specific, entry=entry, is_fallback=False)

    general = project_key(root)
    if general == specific:
        return None
    entry = store.get(general)
    if entry is not None:
        return Resolution(key=general, entry=entry, is_fallback=True)
    return None


def root_of(key: Key) -> str:
    if isinstance(key, (ProjectKey, BranchKey)):
        return key.root
    raise TypeError(f"Not a layout key: {key!r}")


# -- predicates ---------------------------------------------------------------


def branches_of(root: str) -> KeyPredicate:
    """Match branch keys of *root*, leaving its project key alone."""

    def predicate(key: Key) -> bool:
        return isinstance(key, BranchKey) and key.root == root

    return predicate


def all_of(root: str) -> KeyPredicate:
    """Match every key of *root*, branch or project."""

    def predicate(key: Key) -> bool:
        return root_of(key) == root

    return predicate


def dead_projects(is_known_project: Callable[[str], bool]) -> KeyPredicate:
    """Match keys whose root is no longer a known project.

    The existence check runs once per distinct root.
    """
    verdicts: dict[str, bool] = {}

    def predicate(key: Key) -> bool:
        root = root_of(key)
        if root not in verdicts:
            verdicts[root] = bool(is_known_project(root))
        return not verdicts[root]

    return predicate
