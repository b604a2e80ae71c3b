"""Voice input and output module boundaries."""

from .interfaces import RecognitionEngine, RecognitionListener, SpeechOutput
from .output import AudioOutputDevice, VoiceOutputConfig, VoiceOutputService

__all__ = [
    "AudioOutputDevice",
    "RecognitionEngine",
    "RecognitionListener",
    "SpeechOutput",
    "VoiceOutputConfig",
    "VoiceOutputService",
]
