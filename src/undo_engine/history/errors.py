"""Exceptions raised by the history manager."""

from __future__ import annotations


class HistoryError(RuntimeError):
    """Base class for history manager failures."""


class CannotUndoError(HistoryError):
    """Raised by ``undo()`` when no significant edit is available."""

    def __init__(self, message: str = "Cannot undo", *, position: int = 0) -> None:
        super().__init__(message)
        self.position = position


class CannotRedoError(HistoryError):
    """Raised by ``redo()`` when no significant edit is available."""

    def __init__(self, message: str = "Cannot redo", *, position: int = 0) -> None:
        super().__init__(message)
        self.position = position


class ReentrantHistoryError(HistoryError):
    """Raised when a mutating call re-enters a manager that is still mutating."""

    def __init__(self, operation: str, *, active: str) -> None:
        super().__init__(
            f"Cannot run '{operation}' while '{active}' is still in progress"
        )
        self.operation = operation
        self.active = active


__all__ = [
    "HistoryError",
    "CannotUndoError",
    "CannotRedoError",
    "ReentrantHistoryError",
]
