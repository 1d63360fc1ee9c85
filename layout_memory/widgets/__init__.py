"""Widget classes for the layout-memory host app."""

from .panes import FilePane, PaneArea, PaneSnapshotProvider

__all__ = [
    "FilePane",
    "PaneArea",
    "PaneSnapshotProvider",
]
