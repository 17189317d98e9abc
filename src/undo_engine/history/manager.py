"""Linear undo/redo history with significance filtering and a save marker."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

from undo_engine.runtime.config import current_settings
from undo_engine.runtime.telemetry import SpanHandle, record_event, span

from .edit import UndoableEdit
from .errors import CannotRedoError, CannotUndoError, ReentrantHistoryError

Listener = Callable[[], object]


@dataclass(frozen=True, slots=True)
class HistoryStats:
    """Snapshot of the manager state, handy for status bars and debugging."""

    edit_count: int
    position: int
    limit: int
    unmodified_position: Optional[int]
    can_undo: bool
    can_redo: bool
    modified: bool


def _validate_limit(limit: object) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise TypeError(f"limit must be an int, got {type(limit).__name__}")
    if limit < 1:
        raise ValueError("limit must be positive")
    return limit


class UndoManager:
    """Records reversible edits and moves a cursor back and forth through them.

    Edits before ``position`` are applied, edits from ``position`` onwards are
    reverted and available for redo. ``undo``/``redo`` always stop at a
    significant edit, dragging any insignificant edits in between along.

    The manager is single-threaded and not reentrant: calling ``add``,
    ``undo``, ``redo``, ``clear`` or ``set_limit`` from inside an edit callback
    or the listener raises ``ReentrantHistoryError``. Read-only queries are
    fine from the listener.
    """

    def __init__(
        self, limit: Optional[int] = None, *, logger_name: str | None = None
    ) -> None:
        if limit is None:
            limit = current_settings().history_limit
        self._limit = _validate_limit(limit)
        self._edits: List[UndoableEdit] = []
        self._position = 0
        # None means the saved state can no longer be reached.
        self._unmodified_position: Optional[int] = 0
        self._listener: Optional[Listener] = None
        self._logger_name = logger_name
        self._revision = 0
        self._active: Optional[str] = None

    def __len__(self) -> int:
        return len(self._edits)

    @property
    def position(self) -> int:
        return self._position

    @property
    def unmodified_position(self) -> Optional[int]:
        return self._unmodified_position

    @property
    def edits(self) -> tuple[UndoableEdit, ...]:
        return tuple(self._edits)

    def revision(self) -> int:
        return self._revision

    def set_listener(self, listener: Optional[Listener]) -> None:
        """Install the change callback, or remove it with ``None``.

        The listener runs after ``add``, ``undo``, ``redo`` and ``clear``.
        """

        if listener is not None and not callable(listener):
            raise TypeError("listener must be callable or None")
        self._listener = listener

    def get_limit(self) -> int:
        return self._limit

    def set_limit(self, limit: int) -> None:
        """Change the capacity and evict the oldest edits right away.

        Shrinking below the current length drops history silently, including
        edits the cursor could still undo. The listener is not notified.
        """

        limit = _validate_limit(limit)
        with self._mutation("set_limit", limit=limit):
            self._limit = limit
            if self._evict_overflow():
                self._touch()

    def add(self, edit: UndoableEdit) -> None:
        """Record ``edit``, whose forward effect the host already applied.

        Any redoable tail is discarded first. Unless the save marker sits at
        the end of the history, the last edit gets a chance to ``merge`` the
        new one, and failing that the new one may ``replace`` it.
        """

        if not isinstance(edit, UndoableEdit):
            raise TypeError("edit must be an UndoableEdit")

        with self._mutation("add", edit=type(edit).__name__) as handle:
            if self._position < len(self._edits):
                handle.add_metadata("truncated", len(self._edits) - self._position)
                del self._edits[self._position :]

            if not self._edits or self._unmodified_position == len(self._edits):
                self._edits.append(edit)
            else:
                self._coalesce(edit, handle)

            self._evict_overflow()
            self._position = len(self._edits)
            if (
                self._unmodified_position is not None
                and self._unmodified_position >= self._position
            ):
                self._drop_unmodified_marker("add")

            self._touch()
            self._notify()

    def can_undo(self) -> bool:
        return self._find_undo_target(self._position) is not None

    def can_redo(self) -> bool:
        return self._find_redo_target(self._position) is not None

    def undo(self) -> None:
        """Undo back to and including the nearest significant edit.

        Raises ``CannotUndoError`` when there is none. If an edit's ``undo``
        raises, ``position`` stays just after that edit and the listener is
        not called.
        """

        self._ensure_idle("undo")
        target = self._find_undo_target(self._position)
        if target is None:
            self._record(
                "history.undo_unavailable", level="debug", position=self._position
            )
            raise CannotUndoError(position=self._position)

        with self._mutation("undo", position=self._position):
            while self._position > target:
                self._edits[self._position - 1].undo()
                self._position -= 1
            self._touch()
            self._notify()

    def redo(self) -> None:
        """Redo up to and including the next significant edit.

        Raises ``CannotRedoError`` when there is none.
        """

        self._ensure_idle("redo")
        target = self._find_redo_target(self._position)
        if target is None:
            self._record(
                "history.redo_unavailable", level="debug", position=self._position
            )
            raise CannotRedoError(position=self._position)

        with self._mutation("redo", position=self._position):
            while self._position < target:
                self._edits[self._position].redo()
                self._position += 1
            self._touch()
            self._notify()

    def clear(self) -> None:
        with self._mutation("clear"):
            self._edits.clear()
            self._position = 0
            self._unmodified_position = 0
            self._touch()
            self._notify()

    def set_unmodified(self) -> None:
        """Mark the current position as the saved state."""

        self._unmodified_position = self._position

    def is_modified(self) -> bool:
        """Whether the data differs from the last ``set_unmodified`` point.

        Positions separated from the saved one only by insignificant edits
        count as unmodified.
        """

        saved = self._unmodified_position
        if saved is None:
            return True
        if self._position == saved:
            return False
        if len(self._edits) <= saved:
            return True

        before = self._find_undo_target(saved)
        lower = saved if before is None else before + 1
        after = self._find_redo_target(saved)
        upper = saved + 1 if after is None else after - 1
        return self._position < lower or self._position > upper

    def undo_description(self) -> Optional[str]:
        target = self._find_undo_target(self._position)
        if target is None:
            return None
        return getattr(self._edits[target], "description", "")

    def redo_description(self) -> Optional[str]:
        target = self._find_redo_target(self._position)
        if target is None:
            return None
        return getattr(self._edits[target - 1], "description", "")

    def stats(self) -> HistoryStats:
        return HistoryStats(
            edit_count=len(self._edits),
            position=self._position,
            limit=self._limit,
            unmodified_position=self._unmodified_position,
            can_undo=self.can_undo(),
            can_redo=self.can_redo(),
            modified=self.is_modified(),
        )

    def _find_undo_target(self, position: int) -> Optional[int]:
        """Index of the nearest significant edit before ``position``."""

        for index in range(position - 1, -1, -1):
            if self._edits[index].is_significant():
                return index
        return None

    def _find_redo_target(self, position: int) -> Optional[int]:
        """Position just past the nearest significant edit at or after ``position``."""

        for index in range(position, len(self._edits)):
            if self._edits[index].is_significant():
                return index + 1
        return None

    def _coalesce(self, edit: UndoableEdit, handle: SpanHandle) -> None:
        last = self._edits[-1]
        if last.merge(edit):
            handle.add_metadata("coalesced", "merge")
            self._record("history.merged", level="debug", into=type(last).__name__)
            return

        if edit.replace(last):
            self._edits.pop()
            handle.add_metadata("coalesced", "replace")
            self._record("history.replaced", level="debug", old=type(last).__name__)
        self._edits.append(edit)

    def _evict_overflow(self) -> int:
        overflow = len(self._edits) - self._limit
        if overflow <= 0:
            return 0

        del self._edits[:overflow]
        self._position = max(0, self._position - overflow)
        if self._unmodified_position is not None:
            shifted = self._unmodified_position - overflow
            if shifted < 0:
                self._drop_unmodified_marker("evicted")
            else:
                self._unmodified_position = shifted

        self._record("history.evicted", count=overflow, limit=self._limit)
        return overflow

    def _drop_unmodified_marker(self, reason: str) -> None:
        self._unmodified_position = None
        self._record("history.marker_lost", reason=reason)

    def _touch(self) -> None:
        self._revision += 1

    def _notify(self) -> None:
        if self._listener is not None:
            self._listener()

    def _record(self, name: str, *, level: str = "info", **data: Any) -> None:
        record_event(name, level=level, data=data, logger_name=self._logger_name)

    def _ensure_idle(self, operation: str) -> None:
        if self._active is not None:
            raise ReentrantHistoryError(operation, active=self._active)

    @contextmanager
    def _mutation(self, operation: str, **metadata: Any) -> Iterator[SpanHandle]:
        self._ensure_idle(operation)

        payload: Dict[str, Any] = {"edits": len(self._edits), **metadata}
        self._active = operation
        try:
            with span(
                f"history::{operation}",
                logger_name=self._logger_name,
                component="history",
                metadata=payload,
            ) as handle:
                yield handle
        finally:
            self._active = None


__all__ = [
    "HistoryStats",
    "Listener",
    "UndoManager",
]
