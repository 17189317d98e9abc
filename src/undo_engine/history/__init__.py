"""Linear undo/redo history: the edit contract and the manager driving it."""

from .edit import CallbackEdit, UndoableEdit, ValueChangeEdit
from .errors import (
    CannotRedoError,
    CannotUndoError,
    HistoryError,
    ReentrantHistoryError,
)
from .manager import HistoryStats, Listener, UndoManager

__all__ = [
    "UndoableEdit",
    "CallbackEdit",
    "ValueChangeEdit",
    "UndoManager",
    "HistoryStats",
    "Listener",
    "HistoryError",
    "CannotUndoError",
    "CannotRedoError",
    "ReentrantHistoryError",
]
