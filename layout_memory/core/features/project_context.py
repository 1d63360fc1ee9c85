"""Project root and branch detection backed by git.

``run_git`` and the marker search are stateless helpers; the
:class:`GitProjectContext` wraps them around a working directory that the
host moves when it switches project.
"""

from __future__ import annotations

import os
import subprocess
from typing import Callable, Iterable

from ..errors import ProjectNotFound
from ..log import logger

PROJECT_MARKERS = (".git", ".hg", ".project", "pyproject.toml")


def run_git(*args: str, cwd: str | None = None) -> tuple[bool, str]:
    """Run a git command and return *(success, output)*."""
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=10,
            cwd=cwd or os.getcwd(),
        )
        return (
            result.returncode == 0,
            result.stdout.strip() or result.stderr.strip(),
        )
    except FileNotFoundError:
        return False, "git not found"
    except subprocess.TimeoutExpired:
        return False, "git command timed out"
    except OSError as exc:
        return False, str(exc)


def canonical(path: str) -> str:
    return os.path.realpath(os.path.abspath(os.path.expanduser(path)))


def find_marker_root(start: str, markers: Iterable[str] = PROJECT_MARKERS) -> str | None:
    """Walk up from *start* to the nearest directory holding a project marker."""
    current = canonical(start)
    if not os.path.isdir(current):
        current = os.path.dirname(current)
    while True:
        if any(os.path.exists(os.path.join(current, m)) for m in markers):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def git_toplevel(path: str) -> str | None:
    ok, out = run_git("rev-parse", "--show-toplevel", cwd=path)
    return canonical(out) if ok and out else None


def git_branch(root: str) -> str | None:
    """Current branch name, or ``None`` when detached or not a repository."""
    ok, out = run_git("rev-parse", "--abbrev-ref", "HEAD", cwd=root)
    if not ok or not out or out == "HEAD":
        return None
    return out


class GitProjectContext:
    """Current project and branch for a working directory.

    Parameters
    ----------
    cwd:
        Directory the host is working in; moved by :meth:`switch_to`.
    known_roots:
        Optional callable listing roots that have saved layouts, so a project
        can be named by root or basename even after its directory is gone.
    """

    def __init__(
        self,
        cwd: str | None = None,
        *,
        known_roots: Callable[[], Iterable[str]] | None = None,
        markers: Iterable[str] = PROJECT_MARKERS,
    ) -> None:
        self.cwd = canonical(cwd or os.getcwd())
        self._known_roots = known_roots
        self._markers = tuple(markers)

    def switch_to(self, root: str) -> None:
        self.cwd = canonical(root)

    def current_root(self) -> str | None:
        """Root of the project containing ``cwd``, or ``None`` outside one."""
        return self._root_for(self.cwd)

    def current_branch(self) -> str | None:
        root = self.current_root()
        if root is None:
            return None
        return git_branch(root)

    def resolve_root(self, user_input: str) -> str:
        """Turn a path or project name into a canonical project root.

        Saved roots are matched first (by full path, then by unique
        basename) so projects that no longer exist can still be named.

        Raises:
            ProjectNotFound: if nothing matches.
        """
        text = (user_input or "").strip()
        if not text:
            raise ProjectNotFound(user_input)

        known = list(self._known_roots()) if self._known_roots else []
        wanted = canonical(os.path.join(self.cwd, os.path.expanduser(text)))
        for root in known:
            if canonical(root) == wanted or root == text:
                return root
        by_name = [root for root in known if os.path.basename(root) == text]
        if len(by_name) == 1:
            return by_name[0]

        if os.path.isdir(wanted):
            return self._root_for(wanted) or wanted
        raise ProjectNotFound(text)

    def is_known_project(self, path: str) -> bool:
        return os.path.isdir(path)

    def _root_for(self, path: str) -> str | None:
        if not os.path.isdir(path):
            return None
        root = git_toplevel(path)
        if root is None:
            root = find_marker_root(path, self._markers)
            if root is None:
                logger.debug("no project found above %s", path)
        return root
