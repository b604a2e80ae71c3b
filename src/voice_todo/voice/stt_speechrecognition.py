"""Speech-to-text engine powered by ``speech_recognition``."""

from __future__ import annotations

import asyncio
import logging
import threading

from .interfaces import RecognitionEngine, RecognitionListener


class SpeechRecognitionEngine(RecognitionEngine):
    """Background microphone capture that reports phrases to a listener.

    Audio is captured on a worker thread. Every captured phrase produces
    ``on_speech_end`` followed by ``on_result`` when the phrase could be
    transcribed. Events are delivered on the event loop that was running when
    :meth:`start` was called, so listeners never see worker threads.

    Each ``start`` opens a new capture generation. Events from a capture that
    has since been stopped are dropped, even when its worker is still busy
    transcribing after ``stop`` returned.
    """

    def __init__(
        self,
        *,
        language: str = "en-US",
        phrase_time_limit: float | None = 5.0,
        adjust_noise_seconds: float = 0.2,
        sample_rate: int = 16_000,
        chunk_size: int = 1024,
        listen_timeout: float = 1.0,
        logger: logging.Logger | None = None,
    ) -> None:
        try:
            import speech_recognition as sr
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice STT backend unavailable. Install extras with: pip install 'voice-todo[voice]'"
            ) from exc
        self._sr = sr
        self._recognizer = sr.Recognizer()
        self._language = language
        self._phrase_time_limit = phrase_time_limit
        self._adjust_noise_seconds = max(0.0, adjust_noise_seconds)
        self._sample_rate = sample_rate
        self._chunk_size = chunk_size
        self._listen_timeout = listen_timeout
        self._logger = logger or logging.getLogger("voice_todo.voice.stt_speechrecognition")

        self._listener: RecognitionListener | None = None
        self._generation = 0
        self._running: threading.Event | None = None

    def attach(self, listener: RecognitionListener) -> None:
        self._listener = listener

    def start(self) -> None:
        if self._running is not None:
            return

        loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation
        try:
            microphone = self._sr.Microphone(sample_rate=self._sample_rate, chunk_size=self._chunk_size)
        except (OSError, AttributeError) as exc:
            # AttributeError is how speech_recognition reports a missing PyAudio.
            self._logger.warning("microphone_unavailable", extra={"error": str(exc)})
            self._deliver(generation, "on_error", ("audio-capture",))
            return

        running = threading.Event()
        running.set()
        self._running = running
        threading.Thread(
            target=self._capture_loop,
            args=(generation, loop, microphone, running),
            name="speech-capture",
            daemon=True,
        ).start()
        self._logger.info("microphone_opened", extra={"language": self._language, "generation": generation})

    def stop(self) -> None:
        if self._running is None:
            return
        running, self._running = self._running, None
        running.clear()
        self._generation += 1
        self._logger.info("microphone_closed")

    def _capture_loop(
        self,
        generation: int,
        loop: asyncio.AbstractEventLoop,
        microphone,
        running: threading.Event,
    ) -> None:
        """Worker-thread loop: listen for phrases until ``running`` is cleared."""
        try:
            with microphone as source:
                if self._adjust_noise_seconds > 0:
                    self._recognizer.adjust_for_ambient_noise(source, duration=self._adjust_noise_seconds)
                while running.is_set():
                    try:
                        audio = self._recognizer.listen(
                            source,
                            timeout=self._listen_timeout,
                            phrase_time_limit=self._phrase_time_limit,
                        )
                    except self._sr.WaitTimeoutError:
                        continue
                    if not running.is_set():
                        break
                    self._recognize(generation, loop, audio)
        except (OSError, AttributeError) as exc:
            if running.is_set():
                self._logger.warning("microphone_capture_failed", extra={"error": str(exc)})
                self._dispatch(generation, loop, "on_error", "audio-capture")

    def _recognize(self, generation: int, loop: asyncio.AbstractEventLoop, audio) -> None:
        self._dispatch(generation, loop, "on_speech_end")
        try:
            text = self._recognizer.recognize_google(audio, language=self._language)
        except self._sr.UnknownValueError:
            self._logger.debug("phrase_not_understood")
            return
        except self._sr.RequestError as exc:
            self._logger.warning("recognition_request_failed", extra={"error": str(exc)})
            self._dispatch(generation, loop, "on_error", "network")
            return

        text = text.strip()
        if text:
            self._dispatch(generation, loop, "on_result", text)

    def _dispatch(self, generation: int, loop: asyncio.AbstractEventLoop, method: str, *args: str) -> None:
        if generation != self._generation or loop.is_closed():
            self._logger.debug("stale_event_dropped", extra={"event": method, "generation": generation})
            return
        try:
            loop.call_soon_threadsafe(self._deliver, generation, method, args)
        except RuntimeError:
            # The loop closed between the check and the call.
            self._logger.debug("stale_event_dropped", extra={"event": method, "generation": generation})

    def _deliver(self, generation: int, method: str, args: tuple[str, ...]) -> None:
        if generation != self._generation or self._listener is None:
            return
        getattr(self._listener, method)(*args)
