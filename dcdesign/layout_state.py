"""
dcdesign/layout_state.py
========================
Layout Editor — Module/Connection State with Undo/Redo and Autosave

Holds the modules and connections of one layout being edited, a bounded
linear history of snapshots, and the debounced autosave to the layout store.

History rules:
    - A mutation whose canonical ``{modules, connections}`` serialisation
      differs from the current entry drops every entry after the current
      index, appends a new entry and evicts the oldest beyond the limit.
    - Undo / redo move the index and restore that entry; a restoration never
      appends to the history.
    - Selection changes are carried in entries but never create one.
    - An invalid index or entry resets the history to a single entry holding
      the current state.

Autosave rules:
    - Scheduled only when autosave is on, there are unsaved changes and the
      state knows its layout id, acting user and store.
    - Every further mutation restarts the quiet period.
    - At most one store write is in flight; a debounce that fires during a
      write is re-armed instead of writing; an explicit save during a write
      is queued and runs when the write returns.
    - A failed write keeps ``has_changes`` set and notifies the user.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping

from dcdesign.collaborators import LayoutStore, LoggingNotifier, Notifier
from dcdesign.config import AUTOSAVE_DELAY_S, HISTORY_LIMIT
from dcdesign.errors import HistoryError, PersistenceError
from dcdesign.layout import Connection, HistoryEntry, Module, snapshot_key
from dcdesign.monitoring import Monitor, OperationEvent, safe_monitor
from dcdesign.scheduler import ScheduledTask, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

_CONNECTION_KEYS = {
    "source_module_id": "sourceModuleId",
    "target_module_id": "targetModuleId",
}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ModuleState:
    """Editing session for one layout.

    Args:
        layout_id:           Id of the layout in ``store``; ``None`` disables saving.
        user:                Acting user recorded with every write.
        initial_modules:     Modules loaded from the store (treated as saved).
        initial_connections: Connections loaded from the store.
        autosave:            Enable the debounced autosave.
        store:               Layout store collaborator.
        notifier:            User notification collaborator.
        scheduler:           Delayed-task scheduler for the debounce.
        monitor:             Monitoring collaborator.
        autosave_delay_s:    Quiet period before an autosave [s].
        history_limit:       Maximum number of history entries.
        now:                 Returns the ``updatedAt`` timestamp for writes.

    Raises:
        ValueError: If ``history_limit`` < 1, ``autosave_delay_s`` < 0, or the
                    initial modules have duplicate ids.

    Initial connections whose source or target module is missing are dropped.
    """

    def __init__(
        self,
        layout_id: str | None = None,
        user: str | None = None,
        initial_modules: Iterable[Module] = (),
        initial_connections: Iterable[Connection] = (),
        autosave: bool = True,
        store: LayoutStore | None = None,
        notifier: Notifier | None = None,
        scheduler: Scheduler | None = None,
        monitor: Monitor | None = None,
        autosave_delay_s: float = AUTOSAVE_DELAY_S,
        history_limit: int = HISTORY_LIMIT,
        now: Callable[[], str] = _utc_now_iso,
    ) -> None:
        if history_limit < 1:
            raise ValueError(f"history_limit must be at least 1; received history_limit={history_limit!r}")
        if autosave_delay_s < 0:
            raise ValueError(
                f"autosave_delay_s must be non-negative; received autosave_delay_s={autosave_delay_s!r}"
            )

        self._layout_id = layout_id
        self._user = user
        self._autosave = autosave
        self._store = store
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._monitor = safe_monitor(monitor)
        self._autosave_delay_s = autosave_delay_s
        self._history_limit = history_limit
        self._now = now

        self._lock = threading.RLock()
        self._modules: tuple[Module, ...] = tuple(initial_modules)
        self._check_integrity(self._modules, ())
        known = {m.id for m in self._modules}
        connections = tuple(initial_connections)
        self._connections: tuple[Connection, ...] = tuple(
            c for c in connections if c.source_module_id in known and c.target_module_id in known
        )
        if len(self._connections) != len(connections):
            logger.warning(
                "Dropped %d connection(s) referencing missing modules",
                len(connections) - len(self._connections),
            )
        self._selected_module_id: str | None = None

        self._last_saved_key = snapshot_key(self._modules, self._connections)
        self._has_changes = False
        self._history: list[HistoryEntry] = [self._snapshot()]
        self._history_index = 0

        self._pending: ScheduledTask | None = None
        self._saving = False
        self._save_requested = False
        self._disposed = False

    @classmethod
    def from_store(
        cls,
        store: LayoutStore,
        layout_id: str,
        user: str,
        **kwargs: Any,
    ) -> "ModuleState":
        """Open an editing session on a stored layout.

        Raises:
            PersistenceError: If the store fails or the layout does not exist.
        """
        try:
            document = store.get_layout(layout_id)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to load layout {layout_id!r}: {exc}") from exc
        if document is None:
            raise PersistenceError(f"Layout {layout_id!r} not found")

        return cls(
            layout_id=layout_id,
            user=user,
            initial_modules=[Module.from_dict(m) for m in document.get("modules") or []],
            initial_connections=[Connection.from_dict(c) for c in document.get("connections") or []],
            store=store,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def modules(self) -> tuple[Module, ...]:
        return self._modules

    @property
    def connections(self) -> tuple[Connection, ...]:
        return self._connections

    @property
    def selected_module_id(self) -> str | None:
        return self._selected_module_id

    @property
    def has_changes(self) -> bool:
        return self._has_changes

    @property
    def saving(self) -> bool:
        return self._saving

    @property
    def can_undo(self) -> bool:
        return self._history_index > 0

    @property
    def can_redo(self) -> bool:
        return self._history_index < len(self._history) - 1

    @property
    def history_index(self) -> int:
        return self._history_index

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._history)

    @property
    def autosave_pending(self) -> bool:
        return self._pending is not None

    def get_module(self, module_id: str) -> Module | None:
        return next((m for m in self._modules if m.id == module_id), None)

    # ------------------------------------------------------------------
    # Module mutations
    # ------------------------------------------------------------------

    def add_module(self, module: Module) -> None:
        with self._lock:
            if self.get_module(module.id) is not None:
                raise ValueError(f"Module {module.id!r} already exists")
            self._apply(modules=self._modules + (module,))

    def update_module(self, partial: Mapping[str, Any]) -> bool:
        """Merge ``partial`` into the module with ``partial["id"]``.

        Returns:
            False if no module has that id (nothing changes).
        """
        with self._lock:
            module_id = partial["id"]
            current = self.get_module(module_id)
            if current is None:
                logger.debug("update_module: unknown module %s", module_id)
                return False
            updated = Module.from_dict({**current.to_dict(), **partial})
            self._apply(modules=tuple(updated if m.id == module_id else m for m in self._modules))
            return True

    def remove_module(self, module_id: str) -> bool:
        """Delete a module and every connection that starts or ends at it."""
        with self._lock:
            if self.get_module(module_id) is None:
                logger.debug("remove_module: unknown module %s", module_id)
                return False
            selected = None if self._selected_module_id == module_id else self._selected_module_id
            self._apply(
                modules=tuple(m for m in self._modules if m.id != module_id),
                connections=tuple(c for c in self._connections if not c.touches(module_id)),
                selected_module_id=selected,
            )
            return True

    def select_module(self, module_id: str | None) -> None:
        with self._lock:
            if module_id is not None and self.get_module(module_id) is None:
                raise ValueError(f"Cannot select unknown module {module_id!r}")
            self._selected_module_id = module_id

    # ------------------------------------------------------------------
    # Connection mutations
    # ------------------------------------------------------------------

    def add_connection(self, connection: Connection) -> None:
        with self._lock:
            if any(c.id == connection.id for c in self._connections):
                raise ValueError(f"Connection {connection.id!r} already exists")
            for module_id in (connection.source_module_id, connection.target_module_id):
                if self.get_module(module_id) is None:
                    raise ValueError(
                        f"Connection {connection.id!r} references unknown module {module_id!r}"
                    )
            self._apply(connections=self._connections + (connection,))

    def update_connection(self, partial: Mapping[str, Any]) -> bool:
        with self._lock:
            connection_id = partial["id"]
            current = next((c for c in self._connections if c.id == connection_id), None)
            if current is None:
                return False
            changes = {_CONNECTION_KEYS.get(k, k): v for k, v in partial.items()}
            updated = Connection.from_dict({**current.to_dict(), **changes})
            self._check_integrity(self._modules, (updated,))
            self._apply(
                connections=tuple(updated if c.id == connection_id else c for c in self._connections)
            )
            return True

    def remove_connection(self, connection_id: str) -> bool:
        with self._lock:
            if not any(c.id == connection_id for c in self._connections):
                return False
            self._apply(connections=tuple(c for c in self._connections if c.id != connection_id))
            return True

    def clear_all(self) -> None:
        with self._lock:
            self._apply(modules=(), connections=(), selected_module_id=None)

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        return self._step(-1)

    def redo(self) -> bool:
        return self._step(+1)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_changes(self) -> bool:
        """Persist immediately, bypassing the debounce.

        If a write is already in flight the save is queued: the user is told
        so, and an explicit save runs as soon as that write returns.

        Returns:
            True if a write succeeded; False if there was nothing to save,
            no layout identity, the save was queued, or the write failed.
        """
        with self._lock:
            self._cancel_pending()
        return self._persist(explicit=True)

    def dispose(self) -> None:
        """End the session: cancel any pending autosave, keep ``has_changes``."""
        with self._lock:
            self._cancel_pending()
            self._disposed = True

    # ------------------------------------------------------------------
    # Private helpers — history
    # ------------------------------------------------------------------

    def _snapshot(self) -> HistoryEntry:
        return HistoryEntry(
            modules=self._modules,
            connections=self._connections,
            selected_module_id=self._selected_module_id,
            has_changes=self._has_changes,
        )

    def _current_entry(self) -> HistoryEntry:
        if not 0 <= self._history_index < len(self._history):
            raise HistoryError(
                f"History index {self._history_index} outside 0..{len(self._history) - 1}"
            )
        entry = self._history[self._history_index]
        if not isinstance(entry, HistoryEntry):
            raise HistoryError(f"History entry {self._history_index} is {type(entry).__name__}")
        return entry

    def _reset_history(self, error: HistoryError) -> None:
        logger.warning("Resetting layout history: %s", error)
        self._monitor.log_operation(
            OperationEvent(type="layout", action="history_reset", status="warning", error=str(error))
        )
        self._history = [self._snapshot()]
        self._history_index = 0

    def _record_history(self) -> None:
        try:
            current = self._current_entry()
        except HistoryError as exc:
            self._reset_history(exc)
            return

        if snapshot_key(current.modules, current.connections) == snapshot_key(self._modules, self._connections):
            return

        del self._history[self._history_index + 1:]
        self._history.append(self._snapshot())
        overflow = len(self._history) - self._history_limit
        if overflow > 0:
            del self._history[:overflow]
        self._history_index = len(self._history) - 1

    def _step(self, direction: int) -> bool:
        with self._lock:
            try:
                self._current_entry()
            except HistoryError as exc:
                self._reset_history(exc)
                return False

            target = self._history_index + direction
            if not 0 <= target < len(self._history):
                return False

            entry = self._history[target]
            self._history_index = target
            self._modules = entry.modules
            self._connections = entry.connections
            self._selected_module_id = entry.selected_module_id
            self._refresh_changes()
            self._schedule_autosave()
            return True

    def _apply(
        self,
        modules: tuple[Module, ...] | None = None,
        connections: tuple[Connection, ...] | None = None,
        selected_module_id: str | None | object = ...,
    ) -> None:
        if modules is not None:
            self._modules = modules
        if connections is not None:
            self._connections = connections
        if selected_module_id is not ...:
            self._selected_module_id = selected_module_id
        self._refresh_changes()
        self._record_history()
        self._schedule_autosave()

    def _refresh_changes(self) -> None:
        self._has_changes = snapshot_key(self._modules, self._connections) != self._last_saved_key

    @staticmethod
    def _check_integrity(modules: tuple[Module, ...], connections: Iterable[Connection]) -> None:
        ids = [m.id for m in modules]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate module ids in layout")
        known = set(ids)
        for connection in connections:
            for module_id in (connection.source_module_id, connection.target_module_id):
                if module_id not in known:
                    raise ValueError(
                        f"Connection {connection.id!r} references unknown module {module_id!r}"
                    )

    # ------------------------------------------------------------------
    # Private helpers — autosave
    # ------------------------------------------------------------------

    def _has_identity(self) -> bool:
        return bool(self._layout_id) and bool(self._user) and self._store is not None

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule_autosave(self) -> None:
        if self._disposed or not self._autosave or not self._has_changes or not self._has_identity():
            return
        self._cancel_pending()
        self._pending = self._scheduler.call_later(self._autosave_delay_s, self._on_autosave_due)

    def _on_autosave_due(self) -> None:
        with self._lock:
            self._pending = None
            if self._disposed:
                return
            if self._saving:
                # a write is in flight; wait another quiet period
                self._pending = self._scheduler.call_later(self._autosave_delay_s, self._on_autosave_due)
                return
        self._persist(explicit=False)

    def _persist(self, explicit: bool) -> bool:
        action = "save" if explicit else "autosave"
        with self._lock:
            busy = self._saving
            if busy and explicit:
                # picked up by _finish_queued_save when the in-flight write returns
                self._save_requested = True
        if busy:
            if explicit:
                logger.info("Save of layout %s queued behind the write in flight", self._layout_id)
                self._notifier.notify(
                    "default", "Saving", "Save already in progress; your changes will be saved next"
                )
            else:
                logger.debug("%s skipped: a write is already in flight", action)
            return False

        with self._lock:
            if self._saving:
                return False
            if not self._has_changes or not self._has_identity():
                return False
            self._saving = True
            saved_key = snapshot_key(self._modules, self._connections)
            payload = {
                "modules": [m.to_dict() for m in self._modules],
                "connections": [c.to_dict() for c in self._connections],
                "updatedAt": self._now(),
            }
            layout_id, user, store = self._layout_id, self._user, self._store

        try:
            store.update_layout(layout_id, payload, user)
        except Exception as exc:
            error = exc if isinstance(exc, PersistenceError) else PersistenceError(str(exc))
            with self._lock:
                self._saving = False
            logger.error("Error saving layout %s: %s", layout_id, error)
            self._monitor.log_operation(
                OperationEvent(type="layout", action=action, status="error", error=str(error))
            )
            self._notifier.notify("destructive", "Error", "Failed to save layout")
            self._finish_queued_save()
            return False

        with self._lock:
            self._saving = False
            self._last_saved_key = saved_key
            self._refresh_changes()
            # edits made while the write was in flight still need saving
            self._schedule_autosave()

        logger.info("Layout %s saved (%s)", layout_id, action)
        self._monitor.log_operation(OperationEvent(type="layout", action=action, status="success"))
        if explicit:
            self._notifier.notify("default", "Success", "Layout saved successfully")
        self._finish_queued_save()
        return True

    def _finish_queued_save(self) -> None:
        """Run an explicit save requested while the previous write was in flight."""
        with self._lock:
            requested = self._save_requested
            self._save_requested = False
            if not requested:
                return
            already_saved = not self._has_changes
            self._cancel_pending()
        if already_saved:
            # the write that just finished covered the requested state
            self._notifier.notify("default", "Success", "Layout saved successfully")
        else:
            self._persist(explicit=True)
