"""Command layer shared by the TUI and the CLI."""

from .layout_cmds import (
    CommandResult,
    LayoutCommands,
    LayoutCommandsMixin,
    MaintenanceCommands,
)

__all__ = [
    "CommandResult",
    "LayoutCommands",
    "LayoutCommandsMixin",
    "MaintenanceCommands",
]
