"""Textual host app: file panes whose layout is saved per project and branch."""

from __future__ import annotations

import os

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Input, RichLog, Static

from rich.markup import escape

from .core.commands import LayoutCommands, LayoutCommandsMixin
from .core.coordinator import LoadCoordinator, RestoreOutcome, SwitchHook
from .core.errors import ProjectNotFound
from .core.features.project_context import GitProjectContext, git_branch
from .core.layout_store import ConfigStore
from .core.log import logger
from .core.persistence import LayoutFileStore
from .core.pruner import Pruner
from .preferences import Preferences, load_preferences
from .theme import theme_for
from .widgets import FilePane, PaneArea, PaneSnapshotProvider

_APP_CSS = """\
Screen {
    background: $background;
}

#message-log {
    height: 8;
    border-top: solid $accent;
    padding: 0 1;
}

#command-input {
    dock: bottom;
    margin: 0 0;
}

#status-bar {
    dock: bottom;
    height: 1;
    background: $panel;
    color: $text-muted;
    padding: 0 1;
}
"""

_HELP_TEXT = """\
Commands:

  /open <path>          Open a file in the focused pane
  /split                Add an empty pane
  /stack                Toggle side-by-side / stacked panes
  /focus <n>            Focus pane n (1-based)
  /close                Close the focused pane
  /project <path|name>  Switch project
  /layout ...           Save, load and prune layouts (/layout help)
  /quit                 Exit
"""


def build_store(prefs: Preferences) -> ConfigStore:
    """Open the layout store named in *prefs*."""
    return ConfigStore.open(LayoutFileStore(prefs.storage.path))


class LayoutApp(LayoutCommandsMixin, App):
    """File viewer that remembers its pane layout per project and branch."""

    CSS = _APP_CSS
    TITLE = "layout-memory"

    BINDINGS = [
        Binding("ctrl+s", "save_layout", "Save layout", show=True),
        Binding("ctrl+r", "load_layout", "Restore layout", show=True),
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        project_dir: str | None = None,
        *,
        prefs: Preferences | None = None,
        store: ConfigStore | None = None,
        restore_on_start: bool = True,
    ) -> None:
        super().__init__()
        self._prefs = prefs or load_preferences()
        self._restore_on_start = restore_on_start
        self._default_save_scope = self._prefs.save.default_scope

        self.store = store if store is not None else build_store(self._prefs)
        self.projects = GitProjectContext(project_dir, known_roots=self.store.projects)
        self.provider = PaneSnapshotProvider(lambda: self.query_one(PaneArea))
        self.switch_hook = SwitchHook()
        self.coordinator = LoadCoordinator(
            self.store,
            self.provider,
            self.switch_hook,
            on_complete=self._on_layout_restored,
        )
        self._layout_commands = LayoutCommands(
            self.store,
            Pruner(self.store, self.projects),
            self.coordinator,
            self.provider,
            self.projects,
            switch_project=self.switch_project,
            branch_of=git_branch,
            fallback=self._prefs.load.fallback,
        )

    # ── Layout ──────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        with Vertical(id="main-container"):
            yield PaneArea(id="pane-area")
            yield RichLog(id="message-log", markup=True, wrap=True)
        yield Static("", id="status-bar")
        yield Input(placeholder="/help for commands", id="command-input")

    async def on_mount(self) -> None:
        theme = theme_for(self._prefs.display.theme)
        self.register_theme(theme)
        self.theme = theme.name

        self.provider.reset()
        self.query_one("#command-input", Input).focus()
        self._update_status()

        if self._restore_on_start and self.projects.current_root():
            self._show_layout_result(self._layout_commands.load())

    # ── Host project switching ──────────────────────────────────

    def switch_project(self, root: str) -> None:
        """Make *root* the active project.

        Switching throws away the current panes; the switch hook fires after
        the next refresh, once the pane area has been rebuilt.
        """
        self.projects.switch_to(root)
        self.provider.reset()
        self._update_status()
        self.call_after_refresh(self._fire_switch_hook)

    def _fire_switch_hook(self) -> None:
        self.switch_hook.fire()
        self._update_status()

    def _on_layout_restored(self, outcome: RestoreOutcome) -> None:
        files = len(outcome.opened)
        if outcome.ok:
            self._add_system_message(
                f"Layout restored for {escape(outcome.resolution.key.describe())} "
                f"({files} file(s) opened)."
            )
        else:
            self._add_system_message(
                f"[red]Error:[/red] layout restore failed: {escape(str(outcome.restore_error))}"
            )
        if outcome.open_failures:
            missing = "\n".join(
                f"  {escape(path)}: {escape(error)}"
                for path, error in outcome.open_failures.failures
            )
            self._add_system_message(f"[yellow]Could not open:[/yellow]\n{missing}")

    # ── Commands ────────────────────────────────────────────────

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        event.input.value = ""
        if text:
            self._handle_command(text)

    def _handle_command(self, text: str) -> None:
        if not text.startswith("/"):
            self._add_system_message("Commands start with '/'. Try /help.")
            return
        parts = text[1:].split(None, 1)
        cmd = parts[0].lower() if parts else ""
        args = parts[1] if len(parts) > 1 else ""

        handlers = {
            "help": self._cmd_help,
            "open": self._cmd_open,
            "split": self._cmd_split,
            "stack": self._cmd_stack,
            "focus": self._cmd_focus,
            "close": self._cmd_close,
            "project": self._cmd_project,
            "layout": self._cmd_layout,
            "quit": self._cmd_quit,
        }
        handler = handlers.get(cmd)
        if handler is None:
            self._add_system_message(f"Unknown command: /{escape(cmd)}")
            return
        handler(args)
        self._update_status()

    def _cmd_help(self, _args: str) -> None:
        self._add_system_message(_HELP_TEXT)

    def _cmd_open(self, args: str) -> None:
        if not args:
            self._add_system_message("Usage: /open <path>")
            return
        path = self._absolute(args.strip())
        try:
            self.provider.open_file(path)
        except OSError as exc:
            self._add_system_message(f"[red]Error:[/red] {escape(str(exc))}")
            return
        area = self.query_one(PaneArea)
        area.replace_focused(FilePane(path, self.provider.buffers[path]))

    def _cmd_split(self, _args: str) -> None:
        self.query_one(PaneArea).add(FilePane(None))

    def _cmd_stack(self, _args: str) -> None:
        area = self.query_one(PaneArea)
        area.orientation = "horizontal" if area.orientation == "vertical" else "vertical"

    def _cmd_focus(self, args: str) -> None:
        area = self.query_one(PaneArea)
        if not args.strip().isdigit():
            self._add_system_message("Usage: /focus <n>")
            return
        index = int(args) - 1
        if not 0 <= index < len(area.panes()):
            self._add_system_message(f"No pane {escape(args.strip())}")
            return
        area.set_focus_index(index)

    def _cmd_close(self, _args: str) -> None:
        if not self.query_one(PaneArea).close_focused():
            self._add_system_message("No pane to close.")

    def _cmd_project(self, args: str) -> None:
        if not args.strip():
            root = self.projects.current_root()
            self._add_system_message(f"Current project: {escape(root or 'none')}")
            return
        try:
            root = self.projects.resolve_root(args.strip())
        except ProjectNotFound as exc:
            self._add_system_message(f"[red]Error:[/red] {escape(str(exc))}")
            return

        if not self._prefs.load.auto:
            self.switch_project(root)
            self._add_system_message(f"Switched to {escape(root)}.")
            return

        result = self._layout_commands.load(root)
        if result.fallback is None and self._layout_commands.fallback != "open-root":
            self.switch_project(root)
        self._show_layout_result(result)

    def _cmd_quit(self, _args: str) -> None:
        self.exit()

    # ── Actions ─────────────────────────────────────────────────

    def action_save_layout(self) -> None:
        self._cmd_layout_save("")

    def action_load_layout(self) -> None:
        self._cmd_layout_load("")

    # ── Display ─────────────────────────────────────────────────

    def _add_system_message(self, text: str) -> None:
        self.query_one("#message-log", RichLog).write(text)

    def _update_status(self) -> None:
        root = self.projects.current_root()
        branch = self.projects.current_branch() if root else None
        parts = [root or "no project", f"branch: {branch or '-'}"]
        if self.coordinator.pending is not None:
            parts.append("restore pending")
        self.query_one("#status-bar", Static).update(escape("  |  ".join(parts)))

    def _absolute(self, path: str) -> str:
        expanded = os.path.expanduser(path)
        if not os.path.isabs(expanded):
            expanded = os.path.join(self.projects.cwd, expanded)
        return os.path.normpath(expanded)


def run_app(
    project_dir: str | None = None,
    prefs: Preferences | None = None,
    restore_on_start: bool = True,
) -> None:
    """Launch the host app."""
    logger.debug("starting layout-memory in %s", project_dir or ".")
    LayoutApp(project_dir, prefs=prefs, restore_on_start=restore_on_start).run()
