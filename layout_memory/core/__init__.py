"""Key resolution, storage, pruning and two-phase loading of saved layouts."""

from .coordinator import LoadCoordinator, RestoreOutcome, SwitchHook
from .errors import (
    InvalidKey,
    LayoutMemoryError,
    PartialOpenFailure,
    PersistenceFailure,
    ProjectNotFound,
)
from .layout_store import ConfigStore
from .models import BranchKey, Entry, Key, ProjectKey, Resolution
from .pruner import PruneReport, Pruner

__all__ = [
    "BranchKey",
    "ConfigStore",
    "Entry",
    "InvalidKey",
    "Key",
    "LayoutMemoryError",
    "LoadCoordinator",
    "PartialOpenFailure",
    "PersistenceFailure",
    "ProjectKey",
    "ProjectNotFound",
    "PruneReport",
    "Pruner",
    "Resolution",
    "RestoreOutcome",
    "SwitchHook",
]
