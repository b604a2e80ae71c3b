"""Text-to-speech backend powered by ``pyttsx3``."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from .output import AudioOutputDevice


class Pyttsx3AudioOutputDevice(AudioOutputDevice):
    """Speaker playback using a pyttsx3 engine owned by one worker thread."""

    def __init__(
        self,
        *,
        voice_id: str | None = None,
        rate: int | None = None,
        volume: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        try:
            import pyttsx3
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Audio output backend unavailable. Install extras with: pip install 'voice-todo[voice]'"
            ) from exc

        self._pyttsx3 = pyttsx3
        self._voice_id = voice_id
        self._rate = rate
        self._volume = None if volume is None else max(0.0, min(1.0, volume))
        self._logger = logger or logging.getLogger("voice_todo.voice.tts_pyttsx3")
        self._engine = None
        # pyttsx3 drivers are not thread-safe; every call runs on this single worker.
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pyttsx3")

    def say(self, text: str) -> None:
        future = self._executor.submit(self._play, text)
        future.add_done_callback(self._report_failure)

    def close(self, *, wait: bool = False) -> None:
        """Stop the worker; queued speech is dropped unless ``wait`` is set."""
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _play(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        engine = self._ensure_engine()
        engine.say(text)
        engine.runAndWait()

    def _ensure_engine(self):
        if self._engine is None:
            engine = self._pyttsx3.init()
            if self._voice_id:
                engine.setProperty("voice", self._voice_id)
            if self._rate is not None:
                engine.setProperty("rate", self._rate)
            if self._volume is not None:
                engine.setProperty("volume", self._volume)
            self._engine = engine
        return self._engine

    def _report_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._logger.error("speech_playback_failed", exc_info=exc)
