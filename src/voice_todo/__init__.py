"""Voice-driven to-do list and phrase-command demos."""

from .commands import CommandBoard, PhraseCommandSet
from .listening import ListeningController, ListeningObserver
from .models import ListeningState, SessionOutcome, StopReason, ToDoList

__all__ = [
    "CommandBoard",
    "ListeningController",
    "ListeningObserver",
    "ListeningState",
    "PhraseCommandSet",
    "SessionOutcome",
    "StopReason",
    "ToDoList",
]
