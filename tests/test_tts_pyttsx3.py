from __future__ import annotations

import sys
import types


class FakeTtsEngine:
    def __init__(self) -> None:
        self.properties: dict[str, object] = {}
        self.said: list[str] = []
        self.runs = 0

    def setProperty(self, name: str, value: object) -> None:
        self.properties[name] = value

    def say(self, text: str) -> None:
        self.said.append(text)

    def runAndWait(self) -> None:
        self.runs += 1


def test_device_plays_on_worker_with_configured_properties(monkeypatch) -> None:
    engines: list[FakeTtsEngine] = []
    fake = types.ModuleType("pyttsx3")

    def init() -> FakeTtsEngine:
        engine = FakeTtsEngine()
        engines.append(engine)
        return engine

    fake.init = init
    monkeypatch.setitem(sys.modules, "pyttsx3", fake)
    from voice_todo.voice.tts_pyttsx3 import Pyttsx3AudioOutputDevice

    device = Pyttsx3AudioOutputDevice(voice_id="english", rate=150, volume=3.0)
    device.say("Thank you for adding the to-do.")
    device.say("   ")
    device.say("Second")
    device.close(wait=True)

    assert len(engines) == 1
    assert engines[0].properties == {"voice": "english", "rate": 150, "volume": 1.0}
    assert engines[0].said == ["Thank you for adding the to-do.", "Second"]
    assert engines[0].runs == 2
