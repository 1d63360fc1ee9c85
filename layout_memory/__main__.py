"""Entry point for the layout-memory CLI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .core.commands import CommandResult, MaintenanceCommands
from .core.features.project_context import GitProjectContext
from .core.layout_store import ConfigStore
from .core.persistence import LayoutFileStore
from .core.pruner import Pruner
from .log import enable_file_logging, logger
from .preferences import DATA_DIR, Preferences, load_preferences


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="layout-memory",
        description="Save and restore editor layouts per project and branch",
    )
    parser.add_argument(
        "--version",
        "-V",
        action="version",
        version=f"layout-memory {__version__}",
    )
    parser.add_argument(
        "project",
        nargs="?",
        default=None,
        help="Project directory to open (default: current directory)",
    )
    parser.add_argument(
        "--prefs",
        type=Path,
        default=None,
        help="Preferences file (default: ~/.layout-memory/preferences.yaml)",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Layouts file, overriding the preferences",
    )
    parser.add_argument(
        "--no-restore",
        action="store_true",
        help="Don't restore the project's saved layout on start",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write a debug log to ~/.layout-memory/debug.log",
    )

    maintenance = parser.add_mutually_exclusive_group()
    maintenance.add_argument(
        "--list",
        action="store_true",
        help="List projects with saved layouts and exit",
    )
    maintenance.add_argument(
        "--prune-dead",
        action="store_true",
        help="Remove layouts of projects that no longer exist and exit",
    )
    maintenance.add_argument(
        "--prune-branches",
        metavar="PROJECT",
        help="Remove a project's branch layouts (keeping its project layout) and exit",
    )
    maintenance.add_argument(
        "--prune-project",
        metavar="PROJECT",
        help="Remove all layouts of a project and exit",
    )
    return parser


def _maintenance_requested(args: argparse.Namespace) -> bool:
    return bool(
        args.list or args.prune_dead or args.prune_branches or args.prune_project
    )


def run_maintenance(args: argparse.Namespace, prefs: Preferences) -> CommandResult:
    """Run the single non-interactive command selected by *args*."""
    store = ConfigStore.open(LayoutFileStore(prefs.storage.path))
    projects = GitProjectContext(args.project, known_roots=store.projects)
    commands = MaintenanceCommands(store, Pruner(store, projects))

    if args.list:
        return commands.list_projects()
    if args.prune_dead:
        return commands.prune_dead()
    if args.prune_branches:
        return commands.prune_branches(args.prune_branches)
    return commands.prune_project(args.prune_project)


def main(argv: list[str] | None = None) -> int:
    """Run layout-memory."""
    args = build_parser().parse_args(argv)

    if args.debug:
        enable_file_logging(DATA_DIR / "debug.log")

    prefs = load_preferences(args.prefs)
    if args.store is not None:
        prefs.storage.path = args.store.expanduser()

    if _maintenance_requested(args):
        result = run_maintenance(args, prefs)
        print(result.message, file=sys.stdout if result.ok else sys.stderr)
        return 0 if result.ok else 1

    try:
        from .app import run_app

        run_app(args.project, prefs=prefs, restore_on_start=not args.no_restore)
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.debug("Fatal error in layout-memory", exc_info=True)
        import traceback

        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
