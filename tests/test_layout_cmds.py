"""Tests for the layout command surface and the /layout slash-command mixin."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from layout_memory.core.commands import (
    CommandResult,
    LayoutCommands,
    LayoutCommandsMixin,
    MaintenanceCommands,
)
from layout_memory.core.coordinator import LoadCoordinator
from layout_memory.core.errors import PersistenceFailure
from layout_memory.core.layout_store import ConfigStore
from layout_memory.core.models import BranchKey, Entry, ProjectKey
from layout_memory.core.pruner import Pruner


@pytest.fixture
def make_commands(store, hook, projects, make_provider):
    def factory(provider=None, ctx=None, **kwargs):
        provider = provider or make_provider(
            snapshot="SNAP", files=["/p1/a.txt", None, "/p1/b.txt"]
        )
        ctx = ctx or projects
        kwargs.setdefault("switch_project", MagicMock())
        coordinator = LoadCoordinator(store, provider, hook)
        return LayoutCommands(
            store, Pruner(store, ctx), coordinator, provider, ctx, **kwargs
        )

    return factory


@pytest.fixture
def commands(make_commands):
    return make_commands()


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------


class TestSave:
    def test_save_for_both(self, commands, store):
        result = commands.save_for_both()
        assert result.ok
        assert result.message == "Saved layout for branch dev, project (2 file(s))."
        expected = Entry.build("SNAP", ["/p1/a.txt", None, "/p1/b.txt"])
        assert store.get(BranchKey("/p1", "dev")) == expected
        assert store.get(ProjectKey("/p1")) == expected

    def test_save_for_project_only(self, commands, store):
        commands.save_for_project()
        assert store.list_keys() == [ProjectKey("/p1")]

    def test_save_for_branch_only(self, commands, store):
        commands.save_for_branch()
        assert store.list_keys() == [BranchKey("/p1", "dev")]

    def test_branch_save_without_branch_uses_project_key(
        self, make_commands, make_projects, store
    ):
        commands = make_commands(ctx=make_projects(root="/p1", branch=None))
        result = commands.save_for_branch()
        assert result.ok
        assert "No branch detected" in result.message
        assert store.list_keys() == [ProjectKey("/p1")]

    def test_both_without_branch_writes_one_entry(
        self, make_commands, make_projects, store
    ):
        commands = make_commands(ctx=make_projects(root="/p1", branch=None))
        commands.save_for_both()
        assert len(store) == 1

    def test_outside_project(self, make_commands, make_projects, store):
        commands = make_commands(ctx=make_projects(root=None))
        result = commands.save_for_both()
        assert not result.ok
        assert len(store) == 0

    def test_persist_failure_is_a_warning(self, hook, projects, make_provider):
        durable = MagicMock()
        durable.load_all.return_value = {}
        durable.save_all.side_effect = PersistenceFailure("disk full")
        store = ConfigStore.open(durable)
        provider = make_provider()
        commands = LayoutCommands(
            store,
            Pruner(store, projects),
            LoadCoordinator(store, provider, hook),
            provider,
            projects,
            switch_project=MagicMock(),
        )
        result = commands.save_for_project()
        assert result.ok
        assert "Warning: not written to disk: disk full" in result.message
        assert ProjectKey("/p1") in store


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


class TestLoad:
    def test_exact_branch_match(self, commands, store, hook):
        store.put(BranchKey("/p1", "dev"), Entry.build("S2", []))
        result = commands.load()
        assert result.ok
        assert result.fallback is False
        assert result.message == "Restoring branch layout for /p1 @ dev."
        commands._switch_project.assert_called_once_with("/p1")
        assert hook.armed

    def test_project_fallback(self, commands, store):
        store.put(ProjectKey("/p1"), Entry.build("S1", []))
        result = commands.load()
        assert result.ok
        assert result.fallback is True
        assert result.message == (
            "Restoring project layout for /p1. No layout saved for branch dev."
        )

    def test_switch_applies_layout(self, make_commands, store, hook, make_provider):
        provider = make_provider()
        commands = make_commands(provider=provider, switch_project=lambda root: hook.fire())
        store.put(BranchKey("/p1", "dev"), Entry.build("S2", ["/p1/c.txt"]))
        commands.load()
        assert provider.calls == [("open", "/p1/c.txt"), ("restore", "S2")]

    def test_not_found_opens_root(self, commands, hook):
        result = commands.load()
        assert not result.ok
        assert result.fallback is None
        assert result.message == "No saved layout for /p1. Opened the project without one."
        commands._switch_project.assert_called_once_with("/p1")
        assert not hook.armed

    def test_not_found_without_fallback(self, make_commands):
        commands = make_commands(fallback="none")
        result = commands.load()
        assert result.message == "No saved layout for /p1."
        commands._switch_project.assert_not_called()

    def test_other_project_without_branch_lookup(self, commands, store):
        store.put(ProjectKey("/p2"), Entry.build("S", []))
        store.put(BranchKey("/p2", "dev"), Entry.build("SB", []))
        result = commands.load("p2")
        assert result.fallback is False
        assert result.message == "Restoring project layout for /p2."

    def test_other_project_with_branch_lookup(self, make_commands, store):
        commands = make_commands(branch_of=lambda root: "dev")
        store.put(BranchKey("/p2", "dev"), Entry.build("SB", []))
        result = commands.load("p2")
        assert result.message == "Restoring branch layout for /p2 @ dev."

    def test_unknown_project(self, commands):
        result = commands.load("nope")
        assert not result.ok
        assert result.message == "No project found for 'nope'"
        commands._switch_project.assert_not_called()

    def test_outside_project(self, make_commands, make_projects):
        result = make_commands(ctx=make_projects(root=None)).load()
        assert result == CommandResult(False, "Not in a project.")

    def test_cancel_load(self, commands, store, hook):
        store.put(ProjectKey("/p1"), Entry.build("S1", []))
        commands.load()
        assert commands.cancel_load().ok
        assert not hook.armed
        assert not commands.cancel_load().ok


# ---------------------------------------------------------------------------
# Prune and list
# ---------------------------------------------------------------------------


@pytest.fixture
def maintenance(store, projects):
    for key in (ProjectKey("/p1"), BranchKey("/p1", "dev"), BranchKey("/p1", "main")):
        store.put(key, Entry(None))
    store.put(ProjectKey("/gone"), Entry(None))
    return MaintenanceCommands(store, Pruner(store, projects))


class TestMaintenance:
    def test_prune_branches_message(self, maintenance):
        result = maintenance.prune_branches("p1")
        assert result.ok
        assert result.message == (
            "Removed 2 branch layout(s) for /p1.\n  /p1 @ dev\n  /p1 @ main"
        )

    def test_prune_project_message(self, maintenance, store):
        result = maintenance.prune_project("/p1")
        assert result.message.startswith("Removed 3 layout(s) for /p1.")
        assert store.projects() == ["/gone"]

    def test_prune_unknown(self, maintenance, store):
        result = maintenance.prune_project("nope")
        assert not result.ok
        assert len(store) == 4

    def test_prune_dead(self, store, make_projects):
        store.put(ProjectKey("/gone"), Entry(None))
        commands = MaintenanceCommands(store, Pruner(store, make_projects(dead={"/gone"})))
        result = commands.prune_dead()
        assert result.message == "Removed 1 layout(s) of missing projects.\n  /gone"

    def test_prune_nothing(self, maintenance):
        assert maintenance.prune_branches("p2").message == "Removed 0 branch layout(s) for /p2."

    def test_list_projects(self, maintenance):
        result = maintenance.list_projects()
        assert result.message == (
            "Saved layouts (2 project(s)):\n"
            "  /gone  [project]\n"
            "  /p1  [project, dev, main]"
        )

    def test_list_empty(self, store, projects):
        result = MaintenanceCommands(store, Pruner(store, projects)).list_projects()
        assert result.message == "No saved layouts."


# ---------------------------------------------------------------------------
# /layout mixin
# ---------------------------------------------------------------------------


class MockApp(LayoutCommandsMixin):
    """Minimal stub satisfying the self.* contract for the /layout mixin."""

    def __init__(self, commands: LayoutCommands) -> None:
        self._layout_commands = commands
        self._messages: list[str] = []

    def _add_system_message(self, text: str) -> None:
        self._messages.append(text)


@pytest.fixture
def mock_app(commands):
    return MockApp(commands)


class TestLayoutMixin:
    def test_help_is_escaped(self, mock_app):
        mock_app._cmd_layout("")
        assert "\\[project|branch|both]" in mock_app._messages[0]

    def test_unknown_subcommand(self, mock_app):
        mock_app._cmd_layout("frobnicate")
        assert mock_app._messages[0].startswith("Unknown /layout subcommand: frobnicate")

    def test_save_default_scope(self, mock_app, store):
        mock_app._cmd_layout("save")
        assert len(store) == 2

    def test_save_scope_from_preferences(self, mock_app, store):
        mock_app._default_save_scope = "project"
        mock_app._cmd_layout("save")
        assert store.list_keys() == [ProjectKey("/p1")]

    def test_save_bad_scope(self, mock_app, store):
        mock_app._cmd_layout("save sideways")
        assert "Usage: /layout save" in mock_app._messages[0]
        assert len(store) == 0

    def test_load_error_is_red(self, mock_app):
        mock_app._cmd_layout("load nope")
        assert mock_app._messages[0].startswith("[red]Error:[/red] No project found")

    def test_load_named_project(self, mock_app, store):
        store.put(ProjectKey("/p2"), Entry(None))
        mock_app._cmd_layout("load p2")
        assert mock_app._messages == ["Restoring project layout for /p2."]

    def test_cancel_without_pending(self, mock_app):
        mock_app._cmd_layout("cancel")
        assert "No layout restore pending." in mock_app._messages[0]

    def test_list(self, mock_app):
        mock_app._cmd_layout("list")
        assert mock_app._messages == ["No saved layouts."]

    def test_prune_routes(self, mock_app, store):
        store.put(BranchKey("/p1", "dev"), Entry(None))
        store.put(ProjectKey("/p1"), Entry(None))
        mock_app._cmd_layout("prune branches p1")
        assert store.list_keys() == [ProjectKey("/p1")]
        mock_app._cmd_layout("prune project p1")
        assert len(store) == 0

    def test_prune_dead(self, mock_app):
        mock_app._cmd_layout("prune dead")
        assert mock_app._messages == ["Removed 0 layout(s) of missing projects."]

    def test_prune_usage(self, mock_app):
        mock_app._cmd_layout("prune branches")
        assert mock_app._messages[0].startswith("Usage: /layout prune")
