"""File panes and the snapshot provider built on them."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Sequence

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Container, Vertical
from textual.widgets import Static, TextArea

ORIENTATIONS = ("horizontal", "vertical")


class FilePane(Vertical):
    """One window: a title line and a read-only view of a buffer.

    ``file_path`` is ``None`` for a scratch pane with no backing file.
    """

    DEFAULT_CSS = """
    FilePane {
        width: 1fr;
        height: 1fr;
        border: round $panel;
    }

    FilePane.focused-pane {
        border: round $primary;
    }

    FilePane .pane-title {
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(self, file_path: str | None = None, text: str = "") -> None:
        super().__init__(classes="file-pane")
        self.file_path = file_path
        self._text = text

    @property
    def pane_title(self) -> str:
        return Path(self.file_path).name if self.file_path else "*scratch*"

    def compose(self) -> ComposeResult:
        yield Static(escape(self.pane_title), classes="pane-title")
        yield TextArea(self._text, read_only=True, classes="pane-body")


class PaneArea(Container):
    """Container laying its panes out side by side or stacked.

    The pane list is tracked here rather than queried from the DOM so it is
    correct immediately after a rebuild, before Textual has processed the
    pending removals and mounts.
    """

    DEFAULT_CSS = """
    PaneArea {
        layout: horizontal;
        height: 1fr;
    }

    PaneArea.stacked {
        layout: vertical;
    }
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._panes: list[FilePane] = []
        self.focus_index: int | None = None

    @property
    def orientation(self) -> str:
        return "vertical" if self.has_class("stacked") else "horizontal"

    @orientation.setter
    def orientation(self, value: str) -> None:
        if value not in ORIENTATIONS:
            raise ValueError(f"Unknown orientation: {value!r}")
        self.set_class(value == "vertical", "stacked")

    def panes(self) -> list[FilePane]:
        return list(self._panes)

    def show(self, panes: Sequence[FilePane], focus: int | None = None) -> None:
        """Replace every pane with *panes*."""
        self.remove_children()
        self._panes = list(panes)
        if self._panes:
            self.mount(*self._panes)
        self.set_focus_index(focus)

    def add(self, pane: FilePane) -> None:
        self._panes.append(pane)
        self.mount(pane)
        self.set_focus_index(len(self._panes) - 1)

    def replace_focused(self, pane: FilePane) -> None:
        """Show *pane* in place of the focused pane (or add it)."""
        current = self.focused()
        if current is None:
            self.add(pane)
            return
        index = self._panes.index(current)
        self._panes[index] = pane
        self.mount(pane, after=current)
        current.remove()
        self.set_focus_index(index)

    def close_focused(self) -> bool:
        current = self.focused()
        if current is None:
            return False
        index = self._panes.index(current)
        del self._panes[index]
        current.remove()
        self.set_focus_index(min(index, len(self._panes) - 1))
        return True

    def set_focus_index(self, index: int | None) -> None:
        if not self._panes:
            index = None
        elif index is None or not 0 <= index < len(self._panes):
            index = 0 if index is None else len(self._panes) - 1
        self.focus_index = index
        for i, pane in enumerate(self._panes):
            pane.set_class(i == index, "focused-pane")

    def focused(self) -> FilePane | None:
        if self.focus_index is None:
            return None
        return self._panes[self.focus_index]


class PaneSnapshotProvider:
    """Capture and restore the layout of a :class:`PaneArea`.

    Files are opened into ``buffers`` (path -> text); restoring a snapshot
    then shows those buffers in freshly built panes, the way an editor
    restores a window configuration over files it has already visited.

    The snapshot is a plain dict::

        {"orientation": "horizontal", "panes": ["/p/a.txt", None], "focus": 0}
    """

    def __init__(self, area: Callable[[], PaneArea]) -> None:
        self._area = area
        self.buffers: dict[str, str] = {}

    def open_file(self, path: str) -> None:
        """Load *path* into a buffer.  Raises ``OSError`` if it can't be read."""
        self.buffers[path] = Path(path).read_text(encoding="utf-8", errors="replace")

    def list_visible_files(self) -> list[str | None]:
        return [pane.file_path for pane in self._area().panes()]

    def capture(self) -> dict:
        area = self._area()
        return {
            "orientation": area.orientation,
            "panes": [pane.file_path for pane in area.panes()],
            "focus": area.focus_index,
        }

    def restore(self, snapshot: Any) -> None:
        """Rebuild the pane area from *snapshot*.

        Raises:
            ValueError: if *snapshot* is not a layout this provider produced.
        """
        if not isinstance(snapshot, dict) or not isinstance(snapshot.get("panes"), list):
            raise ValueError(f"Not a pane layout snapshot: {snapshot!r}")
        orientation = snapshot.get("orientation", "horizontal")
        if orientation not in ORIENTATIONS:
            raise ValueError(f"Unknown orientation in snapshot: {orientation!r}")
        focus = snapshot.get("focus")
        if focus is not None and not isinstance(focus, int):
            raise ValueError(f"Bad focus index in snapshot: {focus!r}")

        panes = [self.make_pane(path) for path in snapshot["panes"]]
        area = self._area()
        area.orientation = orientation
        area.show(panes, focus)

    def make_pane(self, path: str | None) -> FilePane:
        if path and path in self.buffers:
            return FilePane(path, self.buffers[path])
        if path:
            return FilePane(path, f"[{path} is not open]")
        return FilePane(None)

    def reset(self) -> None:
        """Forget buffers and show a single scratch pane."""
        self.buffers.clear()
        area = self._area()
        area.orientation = "horizontal"
        area.show([FilePane(None)], 0)
