"""Edit contract recorded by ``UndoManager`` plus two ready-made edits."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Hashable


class UndoableEdit(ABC):
    """Base class for every change the history manager records.

    The host applies the forward effect itself before handing the edit to
    ``UndoManager.add``. Only ``undo`` and ``redo`` are required; the other
    hooks default to "never merge, never replace, always significant".
    """

    description: str = ""

    @abstractmethod
    def undo(self) -> None:
        """Revert the effect of this edit."""

    @abstractmethod
    def redo(self) -> None:
        """Re-apply the effect of this edit."""

    def merge(self, edit: "UndoableEdit") -> bool:
        """Try to absorb ``edit``, the edit being added right after this one.

        Return ``True`` when ``edit`` was folded into ``self``; the manager
        then drops ``edit`` and never calls its ``undo``/``redo``.
        """

        del edit
        return False

    def replace(self, edit: "UndoableEdit") -> bool:
        """Return ``True`` if this edit should replace ``edit``, its predecessor."""

        del edit
        return False

    def is_significant(self) -> bool:
        """Whether this edit is user-visible on its own.

        Insignificant edits (selection moves, merges that ended up where they
        started) are undone and redone together with the nearest significant
        edit and do not count towards the modified state.
        """

        return True


class CallbackEdit(UndoableEdit):
    """Edit backed by two zero-argument callables."""

    def __init__(
        self,
        undo_fn: Callable[[], object],
        redo_fn: Callable[[], object],
        *,
        description: str = "",
    ) -> None:
        if not callable(undo_fn) or not callable(redo_fn):
            raise TypeError("undo_fn and redo_fn must be callable")
        self._undo_fn = undo_fn
        self._redo_fn = redo_fn
        self.description = description

    def undo(self) -> None:
        self._undo_fn()

    def redo(self) -> None:
        self._redo_fn()

    def __repr__(self) -> str:
        return f"CallbackEdit(description={self.description!r})"


class ValueChangeEdit(UndoableEdit):
    """A property-style change from ``old_value`` to ``new_value``.

    Consecutive changes to the same ``key`` merge into one step, so dragging a
    slider produces a single undoable edit. When the merged value ends up back
    at ``old_value`` the edit becomes insignificant.
    """

    def __init__(
        self,
        key: Hashable,
        setter: Callable[[Any], object],
        old_value: Any,
        new_value: Any,
        *,
        description: str = "",
    ) -> None:
        if key is None or key == "":
            raise ValueError("key cannot be empty")
        if not callable(setter):
            raise TypeError("setter must be callable")
        self.key = key
        self._setter = setter
        self.old_value = old_value
        self.new_value = new_value
        self.description = description or f"change {key}"

    def undo(self) -> None:
        self._setter(self.old_value)

    def redo(self) -> None:
        self._setter(self.new_value)

    def merge(self, edit: UndoableEdit) -> bool:
        if not isinstance(edit, ValueChangeEdit) or edit.key != self.key:
            return False
        self.new_value = edit.new_value
        return True

    def is_significant(self) -> bool:
        return self.new_value != self.old_value

    def __repr__(self) -> str:
        return (
            f"ValueChangeEdit(key={self.key!r}, old_value={self.old_value!r}, "
            f"new_value={self.new_value!r})"
        )


__all__ = [
    "UndoableEdit",
    "CallbackEdit",
    "ValueChangeEdit",
]
