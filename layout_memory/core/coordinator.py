"""Deferred layout restoration around a host project switch.

Switching project in the host rebuilds its pane area, which throws away any
layout applied before the switch has finished.  Loading is therefore split
in two:

1. :meth:`LoadCoordinator.request_load` picks the entry and arms a one-shot
   continuation on the host's :class:`SwitchHook`.
2. The host switches project and calls :meth:`SwitchHook.fire` once the
   switch is complete.  The continuation opens the saved files, restores the
   snapshot, disarms itself and clears the pending load.

Only one load is ever pending.  A newer request replaces the older one,
whose files and snapshot are never applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Protocol, Sequence

from . import keys
from .errors import PartialOpenFailure
from .layout_store import ConfigStore
from .log import logger
from .models import Resolution


class SnapshotProvider(Protocol):
    """Host primitives for capturing and re-applying a layout."""

    def capture(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...

    def list_visible_files(self) -> Sequence[str | None]: ...

    def open_file(self, path: str) -> None: ...


class SwitchHook:
    """Single-slot, one-shot callback run after a host project switch.

    Arming replaces whatever was armed before, so a callback armed twice
    still runs once.
    """

    def __init__(self) -> None:
        self._callback: Callable[[], object] | None = None

    @property
    def armed(self) -> bool:
        return self._callback is not None

    def arm(self, callback: Callable[[], object]) -> None:
        self._callback = callback

    def disarm(self, callback: Callable[[], object] | None = None) -> None:
        """Remove *callback* if it is the armed one (or whatever is armed)."""
        if callback is None or self._callback is callback:
            self._callback = None

    def fire(self) -> bool:
        """Run the armed callback, if any.  Returns whether one ran."""
        callback = self._callback
        if callback is None:
            return False
        self._callback = None
        callback()
        return True


@dataclass
class PendingLoad:
    """The entry waiting for the next switch-completed event."""

    resolution: Resolution
    continuation: Callable[[], object] | None = None


@dataclass
class RestoreOutcome:
    """What happened when a pending load was applied."""

    resolution: Resolution
    opened: list[str] = field(default_factory=list)
    open_failures: PartialOpenFailure = field(default_factory=PartialOpenFailure)
    restore_error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.restore_error is None


class LoadCoordinator:
    """Two-phase loader: request now, apply after the host's project switch.

    Parameters
    ----------
    store:
        Where saved layouts are looked up.
    provider:
        Host primitives used to open files and restore the snapshot.
    hook:
        The host's switch-completed hook.
    on_complete:
        Optional callback receiving the :class:`RestoreOutcome` of each
        applied load (e.g. to show a status message).
    """

    def __init__(
        self,
        store: ConfigStore,
        provider: SnapshotProvider,
        hook: SwitchHook,
        *,
        on_complete: Callable[[RestoreOutcome], object] | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._hook = hook
        self._pending: PendingLoad | None = None
        self.on_complete = on_complete

    @property
    def pending(self) -> PendingLoad | None:
        return self._pending

    def request_load(self, root: str, branch: str | None) -> Resolution | None:
        """Select the layout for *root*/*branch* and wait for the switch.

        Any earlier pending load is dropped, whether or not this one finds
        anything.  Returns ``None`` when no layout is saved for the project.
        """
        self.cancel()
        resolution = keys.resolve_for_load(self._store, root, branch)
        if resolution is None:
            logger.debug("no saved layout for %s (branch %s)", root, branch)
            return None

        pending = PendingLoad(resolution=resolution)
        pending.continuation = partial(self._on_switch_completed, pending)
        self._pending = pending
        self._hook.arm(pending.continuation)
        logger.debug(
            "layout for %s armed (fallback=%s)",
            resolution.key.describe(),
            resolution.is_fallback,
        )
        return resolution

    def cancel(self) -> bool:
        """Drop the pending load, if any.  Returns whether one was dropped."""
        pending = self._pending
        if pending is None:
            return False
        self._hook.disarm(pending.continuation)
        self._pending = None
        return True

    # -- continuation -----------------------------------------------------------

    def _on_switch_completed(self, pending: PendingLoad) -> RestoreOutcome:
        try:
            outcome = self._apply(pending.resolution)
        finally:
            self._hook.disarm(pending.continuation)
            if self._pending is pending:
                self._pending = None
        if self.on_complete is not None:
            self.on_complete(outcome)
        return outcome

    def _apply(self, resolution: Resolution) -> RestoreOutcome:
        outcome = RestoreOutcome(resolution=resolution)
        for path in resolution.entry.present_files:
            try:
                self._provider.open_file(path)
            except Exception as exc:
                logger.warning("could not open %s while restoring layout: %s", path, exc)
                outcome.open_failures.add(path, exc)
            else:
                outcome.opened.append(path)

        try:
            self._provider.restore(resolution.entry.snapshot)
        except Exception as exc:
            logger.warning(
                "could not restore layout for %s",
                resolution.key.describe(),
                exc_info=True,
            )
            outcome.restore_error = exc
        return outcome
