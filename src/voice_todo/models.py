from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class ListeningState(str, Enum):
    """Lifecycle states of a listening session."""

    IDLE = "idle"
    LISTENING = "listening"
    STOPPED = "stopped"


class StopReason(str, Enum):
    """Why a listening session ended."""

    SILENCE_TIMEOUT = "silence_timeout"
    NO_INPUT_TIMEOUT = "no_input_timeout"
    RECOGNITION_FAILURE = "recognition_failure"
    STOPPED = "stopped"
    TEARDOWN = "teardown"


@dataclass(slots=True, frozen=True)
class SessionOutcome:
    reason: StopReason
    committed: str | None = None


@dataclass(slots=True)
class ToDoList:
    """Ordered to-do entries collected from committed utterances."""

    items: list[str] = field(default_factory=list)

    def append(self, text: str) -> None:
        if text:
            self.items.append(text)

    def __iter__(self) -> Iterator[str]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
