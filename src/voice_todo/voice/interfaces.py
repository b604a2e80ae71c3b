"""Contracts for speech recognition and synthesis."""

from typing import Protocol


class RecognitionListener(Protocol):
    """Receives events emitted by a recognition engine."""

    def on_result(self, text: str) -> None:
        """Handle a recognized utterance."""

    def on_speech_end(self) -> None:
        """Handle the end of a detected speech segment."""

    def on_error(self, code: str) -> None:
        """Handle an engine-reported failure such as ``audio-capture``."""


class RecognitionEngine(Protocol):
    """Captures speech and reports transcripts to an attached listener."""

    def attach(self, listener: RecognitionListener) -> None:
        """Register the listener that receives recognition events."""

    def start(self) -> None:
        """Begin capturing audio."""

    def stop(self) -> None:
        """Stop capturing audio."""


class SpeechOutput(Protocol):
    """Speaks text without blocking the caller."""

    def speak(self, text: str) -> None:
        """Queue ``text`` for spoken playback."""
