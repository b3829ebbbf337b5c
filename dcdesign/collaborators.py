"""
dcdesign/collaborators.py
=========================
Narrow interfaces to the layout document store and to user notifications.

The store is an opaque key-value document store addressed by layout id. Any
exception it raises is treated as a persistence failure by the caller.
:class:`InMemoryLayoutStore` is a reference implementation for the runner and
for tests; it is not a persistence layer.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Literal, Protocol

from dcdesign.errors import PersistenceError

logger = logging.getLogger(__name__)

NotificationVariant = Literal["default", "destructive"]


class LayoutStore(Protocol):
    def get_layout(self, layout_id: str) -> dict[str, Any] | None: ...

    def update_layout(self, layout_id: str, partial: dict[str, Any], acting_user: str) -> None: ...

    def create_layout(self, data: dict[str, Any]) -> str: ...

    def delete_layout(self, layout_id: str, acting_user: str) -> None: ...


class Notifier(Protocol):
    def notify(self, variant: NotificationVariant, title: str, description: str) -> None: ...


class LoggingNotifier:
    """Default notifier: user-facing messages go to the log."""

    def notify(self, variant: NotificationVariant, title: str, description: str) -> None:
        level = logging.ERROR if variant == "destructive" else logging.INFO
        logger.log(level, "%s: %s", title, description)


class InMemoryLayoutStore:
    """Dictionary-backed layout store.

    Documents are deep-copied on the way in and out so callers can never
    mutate stored state by reference. Every write records the acting user
    under ``updatedBy``.
    """

    def __init__(self) -> None:
        self._layouts: dict[str, dict[str, Any]] = {}
        self.writes: int = 0

    def get_layout(self, layout_id: str) -> dict[str, Any] | None:
        layout = self._layouts.get(layout_id)
        return copy.deepcopy(layout) if layout is not None else None

    def update_layout(self, layout_id: str, partial: dict[str, Any], acting_user: str) -> None:
        if layout_id not in self._layouts:
            raise PersistenceError(f"Layout {layout_id!r} does not exist")
        self._layouts[layout_id].update(copy.deepcopy(partial))
        self._layouts[layout_id]["updatedBy"] = acting_user
        self.writes += 1

    def create_layout(self, data: dict[str, Any]) -> str:
        layout_id = uuid.uuid4().hex
        document = copy.deepcopy(data)
        document["id"] = layout_id
        self._layouts[layout_id] = document
        return layout_id

    def delete_layout(self, layout_id: str, acting_user: str) -> None:
        if self._layouts.pop(layout_id, None) is None:
            raise PersistenceError(f"Layout {layout_id!r} does not exist")
        logger.info("Layout %s deleted by %s", layout_id, acting_user)
