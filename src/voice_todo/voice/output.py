"""Text-to-speech orchestration for spoken acknowledgements."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from voice_todo.config import Settings


class AudioOutputDevice(Protocol):
    """Interface for a speaker/audio sink."""

    def say(self, text: str) -> None:
        """Queue text for playback and return immediately."""


@dataclass(slots=True)
class VoiceOutputConfig:
    """Configurable controls for response speech."""

    enabled: bool = True
    max_chars: int = 500

    @classmethod
    def from_settings(cls, settings: Settings) -> VoiceOutputConfig:
        return cls(enabled=settings.voice_enabled, max_chars=settings.speech_max_chars)


class VoiceOutputService:
    """Normalizes response text and sends it to an audio device."""

    def __init__(
        self,
        output_device: AudioOutputDevice,
        config: VoiceOutputConfig | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._output_device = output_device
        self._config = config or VoiceOutputConfig()
        self._logger = logger or logging.getLogger("voice_todo.voice.output")

    def speak(self, text: str) -> str | None:
        """Send speech to the device when output is enabled; return what was spoken."""
        if not self._config.enabled:
            return None

        normalized = " ".join(text.split())
        if not normalized:
            return None

        limited = normalized[: self._config.max_chars]
        try:
            self._output_device.say(limited)
        except Exception:  # noqa: BLE001 - speech is best-effort acknowledgement.
            self._logger.exception("speech_output_failed", extra={"text": limited})
            return None
        return limited
