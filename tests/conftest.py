"""Shared test fixtures for the layout-memory test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from layout_memory.core.coordinator import LoadCoordinator, SwitchHook
from layout_memory.core.errors import ProjectNotFound
from layout_memory.core.layout_store import ConfigStore
from layout_memory.core.persistence import LayoutFileStore


# -- Fakes for the host collaborators -----------------------------------------


class FakeSnapshotProvider:
    """Records every call the core makes into the host."""

    def __init__(self, snapshot=None, files=None, missing=()) -> None:
        self.snapshot = snapshot if snapshot is not None else {"panes": 1}
        self.files = list(files or [])
        self.missing = set(missing)
        self.calls: list[tuple[str, object]] = []
        self.restore_error: Exception | None = None

    def capture(self):
        self.calls.append(("capture", None))
        return self.snapshot

    def list_visible_files(self):
        return list(self.files)

    def open_file(self, path: str) -> None:
        self.calls.append(("open", path))
        if path in self.missing:
            raise FileNotFoundError(f"No such file: {path}")

    def restore(self, snapshot) -> None:
        self.calls.append(("restore", snapshot))
        if self.restore_error is not None:
            raise self.restore_error

    @property
    def opened(self) -> list[str]:
        return [arg for name, arg in self.calls if name == "open"]

    @property
    def restored(self) -> list[object]:
        return [arg for name, arg in self.calls if name == "restore"]


class FakeProjectContext:
    """Project/branch detection driven by plain attributes."""

    def __init__(self, root=None, branch=None, projects=None, dead=()) -> None:
        self.root = root
        self.branch = branch
        self.projects = dict(projects or {})
        self.dead = set(dead)

    def current_root(self):
        return self.root

    def current_branch(self):
        return self.branch

    def resolve_root(self, user_input: str) -> str:
        if user_input in self.projects:
            return self.projects[user_input]
        if user_input in self.projects.values():
            return user_input
        raise ProjectNotFound(user_input)

    def is_known_project(self, path: str) -> bool:
        return path not in self.dead


# -- Fixtures -------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for file-based tests."""
    return tmp_path


@pytest.fixture
def file_store(tmp_path: Path) -> LayoutFileStore:
    return LayoutFileStore(tmp_path / "layouts.json")


@pytest.fixture
def store(file_store: LayoutFileStore) -> ConfigStore:
    return ConfigStore.open(file_store)


@pytest.fixture
def provider() -> FakeSnapshotProvider:
    return FakeSnapshotProvider()


@pytest.fixture
def hook() -> SwitchHook:
    return SwitchHook()


@pytest.fixture
def coordinator(store, provider, hook) -> LoadCoordinator:
    return LoadCoordinator(store, provider, hook)


@pytest.fixture
def projects() -> FakeProjectContext:
    return FakeProjectContext(
        root="/p1",
        branch="dev",
        projects={"p1": "/p1", "p2": "/p2", "gone": "/gone"},
    )


@pytest.fixture
def make_provider():
    """Factory for providers with custom snapshot/files/missing paths."""
    return FakeSnapshotProvider


@pytest.fixture
def make_projects():
    """Factory for project contexts with custom roots and branches."""
    return FakeProjectContext
