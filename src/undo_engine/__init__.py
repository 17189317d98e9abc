"""Embeddable linear undo/redo history manager."""

from .history import (
    CallbackEdit,
    CannotRedoError,
    CannotUndoError,
    HistoryError,
    HistoryStats,
    ReentrantHistoryError,
    UndoableEdit,
    UndoManager,
    ValueChangeEdit,
)

__all__ = [
    "history",
    "runtime",
    "UndoableEdit",
    "CallbackEdit",
    "ValueChangeEdit",
    "UndoManager",
    "HistoryStats",
    "HistoryError",
    "CannotUndoError",
    "CannotRedoError",
    "ReentrantHistoryError",
]

__version__ = "0.1.0"
