"""User preferences for layout-memory.

Loads settings from ~/.layout-memory/preferences.yaml.
Falls back to sensible defaults if the file doesn't exist or is invalid.
Creates a default file on first run so users can discover and edit it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .log import logger

DATA_DIR = Path.home() / ".layout-memory"
PREFS_PATH = DATA_DIR / "preferences.yaml"
DEFAULT_STORE_PATH = DATA_DIR / "layouts.json"

FALLBACK_ACTIONS = ("open-root", "none")
SAVE_SCOPES = ("project", "branch", "both")

_DEFAULT_YAML = """\
# layout-memory preferences
# Delete this file to reset to defaults.

storage:
  path: ""                       # layouts file (empty = ~/.layout-memory/layouts.json)

load:
  fallback: open-root            # no saved layout: open-root (switch anyway) or none
  auto: true                     # /project <path> restores the saved layout

save:
  default_scope: both            # /layout save with no scope: project, branch or both

display:
  theme: dark                    # dark or light
"""


@dataclass
class StoragePreferences:
    """Where saved layouts live."""

    path: Path = DEFAULT_STORE_PATH


@dataclass
class LoadPreferences:
    """Behaviour of /layout load and project switching."""

    fallback: str = "open-root"
    auto: bool = True


@dataclass
class SavePreferences:
    default_scope: str = "both"


@dataclass
class DisplayPreferences:
    theme: str = "dark"


@dataclass
class Preferences:
    """Top-level preferences."""

    storage: StoragePreferences = field(default_factory=StoragePreferences)
    load: LoadPreferences = field(default_factory=LoadPreferences)
    save: SavePreferences = field(default_factory=SavePreferences)
    display: DisplayPreferences = field(default_factory=DisplayPreferences)


def load_preferences(path: Path | None = None) -> Preferences:
    """Load preferences from YAML file.

    Falls back to sensible defaults if the file doesn't exist or is invalid.
    Creates a default preferences file on first run.
    """
    path = path or PREFS_PATH
    prefs = Preferences()

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError):
            logger.debug("failed to read preferences from %s", path, exc_info=True)
            return prefs
        if not isinstance(data, dict):
            return prefs
        if isinstance(data.get("storage"), dict):
            raw_path = data["storage"].get("path")
            if raw_path:
                prefs.storage.path = Path(str(raw_path)).expanduser()
        if isinstance(data.get("load"), dict):
            ldata = data["load"]
            if ldata.get("fallback") in FALLBACK_ACTIONS:
                prefs.load.fallback = ldata["fallback"]
            if "auto" in ldata:
                prefs.load.auto = bool(ldata["auto"])
        if isinstance(data.get("save"), dict):
            scope = data["save"].get("default_scope")
            if scope in SAVE_SCOPES:
                prefs.save.default_scope = scope
        if isinstance(data.get("display"), dict):
            theme = data["display"].get("theme")
            if theme:
                prefs.display.theme = str(theme)
    else:
        # Create default file for user to customize
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(_DEFAULT_YAML, encoding="utf-8")
        except OSError:
            logger.debug("could not write default preferences to %s", path, exc_info=True)

    return prefs
