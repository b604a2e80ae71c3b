"""Listening session bounded by no-input and silence timeouts."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

from voice_todo.config import Settings
from voice_todo.models import ListeningState, SessionOutcome, StopReason, ToDoList
from voice_todo.voice.interfaces import RecognitionEngine, SpeechOutput

DEFAULT_SILENCE_TIMEOUT_SECONDS = 5.0
DEFAULT_NO_INPUT_TIMEOUT_SECONDS = 10.0
DEFAULT_ACKNOWLEDGEMENT = "Thank you for adding the to-do."


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with ``call_later``; an asyncio event loop qualifies."""

    def call_later(self, delay: float, callback: Callable[..., object], *args: object) -> TimerHandle: ...


class ListeningObserver(Protocol):
    """Observational callbacks for a presentation layer."""

    def on_state_change(self, state: ListeningState) -> None: ...

    def on_todo_committed(self, text: str) -> None: ...

    def on_transcript_update(self, text: str) -> None: ...


class ListeningController:
    """Owns one listening session and decides when its transcript becomes a to-do.

    A session starts with a no-input deadline. The first result cancels it, and
    every result or speech-end re-arms a silence deadline; only one deadline is
    pending at a time. When the silence deadline fires with a transcript, the
    transcript is appended to ``todos`` and acknowledged through ``speech``.
    Every other way a session ends discards the transcript. Errors are logged and
    never raised to the caller; the controller returns to ``IDLE`` and can be
    started again.
    """

    def __init__(
        self,
        engine: RecognitionEngine,
        speech: SpeechOutput,
        todos: ToDoList,
        *,
        observer: ListeningObserver | None = None,
        scheduler: Scheduler | None = None,
        silence_timeout_seconds: float = DEFAULT_SILENCE_TIMEOUT_SECONDS,
        no_input_timeout_seconds: float = DEFAULT_NO_INPUT_TIMEOUT_SECONDS,
        acknowledgement: str = DEFAULT_ACKNOWLEDGEMENT,
        logger: logging.Logger | None = None,
    ) -> None:
        if silence_timeout_seconds <= 0 or no_input_timeout_seconds <= 0:
            raise ValueError("Listening timeouts must be positive")

        self._engine = engine
        self._speech = speech
        self._todos = todos
        self._observer = observer
        self._scheduler = scheduler
        self._silence_timeout_seconds = silence_timeout_seconds
        self._no_input_timeout_seconds = no_input_timeout_seconds
        self._acknowledgement = acknowledgement
        self._logger = logger or logging.getLogger("voice_todo.listening")

        self._state = ListeningState.IDLE
        self._transcript = ""
        self._timer: TimerHandle | None = None
        self._timer_reason: StopReason | None = None
        self._last_outcome: SessionOutcome | None = None

        self._engine.attach(self)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        engine: RecognitionEngine,
        speech: SpeechOutput,
        todos: ToDoList,
        observer: ListeningObserver | None = None,
        scheduler: Scheduler | None = None,
    ) -> ListeningController:
        return cls(
            engine,
            speech,
            todos,
            observer=observer,
            scheduler=scheduler,
            silence_timeout_seconds=settings.silence_timeout_seconds,
            no_input_timeout_seconds=settings.no_input_timeout_seconds,
            acknowledgement=settings.acknowledgement,
        )

    @property
    def state(self) -> ListeningState:
        return self._state

    @property
    def transcript(self) -> str:
        return self._transcript

    @property
    def todos(self) -> ToDoList:
        return self._todos

    @property
    def last_outcome(self) -> SessionOutcome | None:
        """Outcome of the most recently finished session."""
        return self._last_outcome

    @property
    def pending_deadline(self) -> StopReason | None:
        """Which deadline is armed, if any."""
        return self._timer_reason if self._timer is not None else None

    def start(self) -> bool:
        """Begin a session; returns ``False`` unless the controller is idle."""
        # STOPPED means a session is still being torn down.
        if self._state is not ListeningState.IDLE:
            self._logger.info("listening_already_active", extra={"state": self._state.value})
            return False

        self._transcript = ""
        self._set_state(ListeningState.LISTENING)
        self._logger.info("listening_started", extra={"no_input_timeout": self._no_input_timeout_seconds})
        try:
            self._engine.start()
        except Exception as exc:  # noqa: BLE001 - capture failure is recoverable by retrying start().
            self._logger.warning("recognition_start_failed", extra={"error": f"{type(exc).__name__}: {exc}"})
            self._finish(StopReason.RECOGNITION_FAILURE)
            return True

        # The engine may have reported an error synchronously while starting.
        if self._state is ListeningState.LISTENING:
            self._arm(StopReason.NO_INPUT_TIMEOUT, self._no_input_timeout_seconds)
        return True

    def stop(self) -> None:
        """Abort the running session without committing."""
        if self._state is ListeningState.LISTENING:
            self._finish(StopReason.STOPPED)

    def close(self) -> None:
        """Tear down: cancel timers and stop the engine before release."""
        if self._state is ListeningState.LISTENING:
            self._finish(StopReason.TEARDOWN)
        else:
            self._cancel_timer()

    def on_result(self, text: str) -> None:
        if self._state is not ListeningState.LISTENING:
            self._logger.debug("result_ignored", extra={"state": self._state.value})
            return

        self._transcript = text
        self._logger.info("transcript_received", extra={"transcript": text})
        self._notify("on_transcript_update", text)
        self._arm(StopReason.SILENCE_TIMEOUT, self._silence_timeout_seconds)

    def on_speech_end(self) -> None:
        if self._state is not ListeningState.LISTENING:
            return

        self._logger.debug("speech_ended")
        self._arm(StopReason.SILENCE_TIMEOUT, self._silence_timeout_seconds)

    def on_error(self, code: str) -> None:
        if self._state is not ListeningState.LISTENING:
            return

        self._logger.warning("recognition_error", extra={"code": code})
        self._finish(StopReason.RECOGNITION_FAILURE)

    def _arm(self, reason: StopReason, delay: float) -> None:
        self._cancel_timer()
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._timer_reason = reason
        self._timer = scheduler.call_later(delay, self._on_deadline, reason)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._timer_reason = None

    def _on_deadline(self, reason: StopReason) -> None:
        if self._state is not ListeningState.LISTENING or reason is not self._timer_reason:
            return
        self._timer = None
        self._logger.info("listening_deadline_reached", extra={"reason": reason.value})
        self._finish(reason)

    def _finish(self, reason: StopReason) -> SessionOutcome:
        self._cancel_timer()
        self._set_state(ListeningState.STOPPED)
        try:
            self._engine.stop()
        except Exception:  # noqa: BLE001 - the session is over either way.
            self._logger.exception("recognition_stop_failed")

        transcript = self._transcript.strip()
        committed = transcript if reason is StopReason.SILENCE_TIMEOUT and transcript else None
        self._transcript = ""
        self._set_state(ListeningState.IDLE)

        outcome = SessionOutcome(reason=reason, committed=committed)
        self._last_outcome = outcome
        self._logger.info("listening_stopped", extra={"reason": reason.value, "committed": committed is not None})
        if committed is not None:
            self._commit(committed)
        return outcome

    def _commit(self, text: str) -> None:
        self._todos.append(text)
        self._logger.info("todo_committed", extra={"todo": text, "todo_count": len(self._todos)})
        self._notify("on_todo_committed", text)
        try:
            self._speech.speak(self._acknowledgement)
        except Exception:  # noqa: BLE001 - acknowledgement is fire-and-forget.
            self._logger.exception("acknowledgement_failed")

    def _set_state(self, state: ListeningState) -> None:
        self._state = state
        self._notify("on_state_change", state)

    def _notify(self, method: str, value: object) -> None:
        if self._observer is None:
            return
        try:
            getattr(self._observer, method)(value)
        except Exception:  # noqa: BLE001 - observers must not break the session.
            self._logger.exception("observer_failed", extra={"callback": method})
