"""Layout commands (/layout).

:class:`LayoutCommands` is the command surface the UI and CLI call: every
operation returns a :class:`CommandResult` instead of raising.
:class:`LayoutCommandsMixin` routes ``/layout`` slash commands onto it and
renders the results as system messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from rich.markup import escape

from ..coordinator import LoadCoordinator, SnapshotProvider
from ..errors import InvalidKey, ProjectNotFound
from ..keys import branch_key, project_key
from ..layout_store import ConfigStore
from ..log import logger
from ..models import BranchKey, Entry, Key
from ..pruner import PruneReport, Pruner


class ProjectContext(Protocol):
    def current_root(self) -> str | None: ...

    def current_branch(self) -> str | None: ...

    def resolve_root(self, user_input: str) -> str: ...

    def is_known_project(self, path: str) -> bool: ...


@dataclass
class CommandResult:
    """Outcome of a layout command.

    ``fallback`` is only set by load: ``True`` when the project-wide layout
    stood in for a missing branch layout, ``False`` for an exact match.
    """

    ok: bool
    message: str
    fallback: bool | None = None


class MaintenanceCommands:
    """Prune and list saved layouts; needs no host."""

    def __init__(self, store: ConfigStore, pruner: Pruner) -> None:
        self.store = store
        self.pruner = pruner

    # -- prune --------------------------------------------------------------

    def prune_branches(self, identifier: str) -> CommandResult:
        return self._prune(lambda: self.pruner.prune_branches(identifier), "branch layout")

    def prune_project(self, identifier: str) -> CommandResult:
        return self._prune(lambda: self.pruner.prune_project(identifier), "layout")

    def prune_dead(self) -> CommandResult:
        return self._prune(self.pruner.prune_dead, "layout")

    def _prune(self, run: Callable[[], PruneReport], noun: str) -> CommandResult:
        try:
            report = run()
        except ProjectNotFound as exc:
            logger.debug("prune aborted: %s", exc)
            return CommandResult(False, str(exc))
        where = f" for {report.root}" if report.root else " of missing projects"
        message = f"Removed {report.count} {noun}(s){where}."
        if report.count:
            message += "\n" + "\n".join(f"  {name}" for name in report.describe_removed())
        if report.count and self.store.last_persist_error is not None:
            message += f"\nWarning: not written to disk: {self.store.last_persist_error}"
        return CommandResult(True, message)

    # -- list ---------------------------------------------------------------

    def list_projects(self) -> CommandResult:
        roots = self.store.projects()
        if not roots:
            return CommandResult(True, "No saved layouts.")
        branches: dict[str, list[str]] = {root: [] for root in roots}
        has_project: set[str] = set()
        for key in self.store.list_keys():
            if isinstance(key, BranchKey):
                branches[key.root].append(key.branch)
            else:
                has_project.add(key.root)
        lines = [f"Saved layouts ({len(roots)} project(s)):"]
        for root in roots:
            parts = []
            if root in has_project:
                parts.append("project")
            parts.extend(sorted(branches[root]))
            lines.append(f"  {root}  [{', '.join(parts)}]")
        return CommandResult(True, "\n".join(lines))


class LayoutCommands(MaintenanceCommands):
    """Save, load, prune and list saved layouts.

    Parameters
    ----------
    store, pruner, coordinator:
        The core components.
    provider:
        Host primitives used to capture the current layout.
    projects:
        Current project/branch detection.
    switch_project:
        Host action that switches to a project root.  It must fire the
        coordinator's switch hook once the switch is complete.
    branch_of:
        Optional lookup of the checked-out branch of another project; used
        when loading a project other than the current one.
    fallback:
        ``"open-root"`` to switch to a project even without a saved layout,
        ``"none"`` to leave the host alone.
    """

    def __init__(
        self,
        store: ConfigStore,
        pruner: Pruner,
        coordinator: LoadCoordinator,
        provider: SnapshotProvider,
        projects: ProjectContext,
        *,
        switch_project: Callable[[str], object],
        branch_of: Callable[[str], str | None] | None = None,
        fallback: str = "open-root",
    ) -> None:
        super().__init__(store, pruner)
        self.coordinator = coordinator
        self.provider = provider
        self.projects = projects
        self._switch_project = switch_project
        self._branch_of = branch_of
        self.fallback = fallback

    # -- save ---------------------------------------------------------------

    def save_for_project(self) -> CommandResult:
        return self._save(branch_scope=False, project_scope=True)

    def save_for_branch(self) -> CommandResult:
        return self._save(branch_scope=True, project_scope=False)

    def save_for_both(self) -> CommandResult:
        return self._save(branch_scope=True, project_scope=True)

    def _save(self, *, branch_scope: bool, project_scope: bool) -> CommandResult:
        root = self.projects.current_root()
        if not root:
            return CommandResult(False, "Not in a project; nothing saved.")
        branch = self.projects.current_branch() if branch_scope else None

        try:
            targets: list[Key] = []
            if branch_scope:
                targets.append(branch_key(root, branch))
            if project_scope:
                targets.append(project_key(root))
        except InvalidKey as exc:
            return CommandResult(False, str(exc))
        targets = list(dict.fromkeys(targets))

        entry = Entry.build(self.provider.capture(), self.provider.list_visible_files())
        persisted = self.store.put_many((key, entry) for key in targets)

        names = ", ".join(_describe_scope(key) for key in targets)
        message = f"Saved layout for {names} ({len(entry.present_files)} file(s))."
        if branch_scope and not branch:
            message += " No branch detected; saved as the project layout."
        if not persisted:
            message += f" Warning: not written to disk: {self.store.last_persist_error}"
        return CommandResult(True, message)

    # -- load ---------------------------------------------------------------

    def load(self, project: str | None = None) -> CommandResult:
        """Restore the saved layout for *project* (default: current project)."""
        try:
            if project:
                root = self.projects.resolve_root(project)
            else:
                root = self.projects.current_root()
                if not root:
                    return CommandResult(False, "Not in a project.")
            branch = self._branch_for(root)
            resolution = self.coordinator.request_load(root, branch)
        except (InvalidKey, ProjectNotFound) as exc:
            return CommandResult(False, str(exc))

        if resolution is None:
            message = f"No saved layout for {root}."
            if self.fallback == "open-root":
                self._switch_project(root)
                message += " Opened the project without one."
            return CommandResult(False, message)

        label = "branch" if isinstance(resolution.key, BranchKey) else "project"
        message = f"Restoring {label} layout for {resolution.key.describe()}."
        if resolution.is_fallback:
            message += f" No layout saved for branch {branch}."
        self._switch_project(root)
        return CommandResult(True, message, fallback=resolution.is_fallback)

    def cancel_load(self) -> CommandResult:
        if self.coordinator.cancel():
            return CommandResult(True, "Pending layout restore cancelled.")
        return CommandResult(False, "No layout restore pending.")

    def _branch_for(self, root: str) -> str | None:
        if root == self.projects.current_root():
            return self.projects.current_branch()
        if self._branch_of is not None:
            return self._branch_of(root)
        return None


def _describe_scope(key: Key) -> str:
    if isinstance(key, BranchKey):
        return f"branch {key.branch}"
    return "project"


_HELP_TEXT = """\
/layout commands:

  /layout save [project|branch|both]   Save the current layout
  /layout load [project]               Restore a saved layout
  /layout cancel                       Drop a pending restore
  /layout list                         List projects with saved layouts
  /layout prune branches <project>     Remove a project's branch layouts
  /layout prune project <project>      Remove all of a project's layouts
  /layout prune dead                   Remove layouts of missing projects
  /layout help                         Show this help
"""


class LayoutCommandsMixin:
    """/layout command mixin on top of :class:`LayoutCommands`."""

    _layout_commands: LayoutCommands
    _default_save_scope: str = "both"

    def _cmd_layout(self, args: str) -> None:
        """Handle /layout commands."""
        parts = args.strip().split(None, 1)
        sub = parts[0].lower() if parts else "help"
        rest = parts[1].strip() if len(parts) > 1 else ""

        handlers: dict[str, Callable[[str], None]] = {
            "help": self._cmd_layout_help,
            "save": self._cmd_layout_save,
            "load": self._cmd_layout_load,
            "cancel": self._cmd_layout_cancel,
            "list": self._cmd_layout_list,
            "prune": self._cmd_layout_prune,
        }
        handler = handlers.get(sub)
        if handler is None:
            self._add_system_message(  # type: ignore[attr-defined]
                f"Unknown /layout subcommand: {escape(sub)}\n\n{escape(_HELP_TEXT)}"
            )
            return
        handler(rest)

    def _cmd_layout_help(self, _args: str) -> None:
        self._add_system_message(escape(_HELP_TEXT))  # type: ignore[attr-defined]

    def _cmd_layout_save(self, args: str) -> None:
        scope = args.lower() or self._default_save_scope
        actions = {
            "project": self._layout_commands.save_for_project,
            "branch": self._layout_commands.save_for_branch,
            "both": self._layout_commands.save_for_both,
        }
        action = actions.get(scope)
        if action is None:
            self._add_system_message(escape("Usage: /layout save [project|branch|both]"))  # type: ignore[attr-defined]
            return
        self._show_layout_result(action())

    def _cmd_layout_load(self, args: str) -> None:
        self._show_layout_result(self._layout_commands.load(args or None))

    def _cmd_layout_cancel(self, _args: str) -> None:
        self._show_layout_result(self._layout_commands.cancel_load())

    def _cmd_layout_list(self, _args: str) -> None:
        self._show_layout_result(self._layout_commands.list_projects())

    def _cmd_layout_prune(self, args: str) -> None:
        parts = args.split(None, 1)
        what = parts[0].lower() if parts else ""
        target = parts[1].strip() if len(parts) > 1 else ""

        if what == "dead":
            self._show_layout_result(self._layout_commands.prune_dead())
        elif what == "branches" and target:
            self._show_layout_result(self._layout_commands.prune_branches(target))
        elif what == "project" and target:
            self._show_layout_result(self._layout_commands.prune_project(target))
        else:
            self._add_system_message(  # type: ignore[attr-defined]
                "Usage: /layout prune branches <project> | project <project> | dead"
            )

    def _show_layout_result(self, result: CommandResult) -> None:
        text = escape(result.message)
        if not result.ok:
            text = f"[red]Error:[/red] {text}"
        self._add_system_message(text)  # type: ignore[attr-defined]
