from __future__ import annotations

import asyncio
import importlib
import sys
import types

import pytest


def test_console_entrypoint_exposes_app() -> None:
    pytest.importorskip("typer")

    module = importlib.import_module("voice_todo.main")

    assert hasattr(module, "app")
    assert module.app is not None


def test_config_command_prints_settings() -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_todo.main import app

    result = typer_testing.CliRunner().invoke(app, ["config"])

    assert result.exit_code == 0
    assert "silence_timeout_seconds" in result.stdout


def test_typed_commands_drive_board() -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_todo.main import app

    result = typer_testing.CliRunner().invoke(
        app,
        ["commands", "--typed"],
        input="hello\nchange color to blue\nstop\n",
    )

    assert result.exit_code == 0
    assert "hii" in result.stdout
    assert "'background': 'blue'" in result.stdout


def test_listen_reports_actionable_error_when_voice_backends_missing(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_todo.main import app

    fake_stt = types.ModuleType("voice_todo.voice.stt_speechrecognition")
    fake_tts = types.ModuleType("voice_todo.voice.tts_pyttsx3")

    class _MissingBackend:
        def __init__(self, *args, **kwargs) -> None:
            raise RuntimeError("Install: pip install 'voice-todo[voice]'")

    fake_stt.SpeechRecognitionEngine = _MissingBackend
    fake_tts.Pyttsx3AudioOutputDevice = _MissingBackend

    monkeypatch.setitem(sys.modules, "voice_todo.voice.stt_speechrecognition", fake_stt)
    monkeypatch.setitem(sys.modules, "voice_todo.voice.tts_pyttsx3", fake_tts)

    result = typer_testing.CliRunner().invoke(app, ["listen"], catch_exceptions=False)

    assert result.exit_code == 1
    assert "voice-todo[voice]" in result.stdout


class _ScriptedEngine:
    """Emits queued phrases on the running loop after each start."""

    def __init__(self, phrases: list[str] | None = None, interrupt: bool = False) -> None:
        self.phrases = list(phrases or [])
        self.interrupt = interrupt
        self.listener = None
        self.starts = 0
        self.stops = 0

    def attach(self, listener) -> None:
        self.listener = listener

    def start(self) -> None:
        self.starts += 1
        loop = asyncio.get_running_loop()
        if self.interrupt:
            loop.call_soon(self._raise_interrupt)
        elif self.phrases:
            loop.call_soon(self.listener.on_result, self.phrases.pop(0))

    def stop(self) -> None:
        self.stops += 1

    @staticmethod
    def _raise_interrupt() -> None:
        raise KeyboardInterrupt


class _RecordingSpeech:
    def __init__(self) -> None:
        self.spoken: list[str] = []

    def speak(self, text: str) -> None:
        self.spoken.append(text)


def _patch_backends(monkeypatch, engine: _ScriptedEngine, speech: _RecordingSpeech) -> None:
    import voice_todo.main as main_module

    monkeypatch.setattr(main_module, "_build_engine", lambda: engine)
    monkeypatch.setattr(main_module, "_build_speech_output", lambda: speech)


def test_listen_commits_spoken_todo_then_quits(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_todo.main import app

    engine = _ScriptedEngine(["buy milk"])
    speech = _RecordingSpeech()
    _patch_backends(monkeypatch, engine, speech)

    result = typer_testing.CliRunner().invoke(
        app,
        ["listen", "--silence-timeout", "0.05", "--no-input-timeout", "1"],
        input="\nq\n",
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert "'todo_added': 'buy milk'" in result.stdout
    assert "'todos': ['buy milk']" in result.stdout
    assert speech.spoken == ["Thank you for adding the to-do."]
    assert engine.starts == 1
    assert engine.stops == 1


def test_listen_interrupt_tears_down_session(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_todo.main import app

    engine = _ScriptedEngine(interrupt=True)
    speech = _RecordingSpeech()
    _patch_backends(monkeypatch, engine, speech)

    result = typer_testing.CliRunner().invoke(app, ["listen"], input="\n", catch_exceptions=False)

    assert result.exit_code == 0
    assert engine.starts == 1
    assert engine.stops >= 1
    assert "'todos': []" in result.stdout
    assert speech.spoken == []


def test_listen_rejects_zero_timeout(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_todo.main import app

    engine = _ScriptedEngine()
    _patch_backends(monkeypatch, engine, _RecordingSpeech())

    result = typer_testing.CliRunner().invoke(app, ["listen", "--silence-timeout", "0"], input="q\n")

    assert result.exit_code == 1
    assert "must be positive" in result.stdout
    assert engine.starts == 0


def test_voice_commands_exit_on_recognition_error(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_todo.main import app

    class _FailingEngine(_ScriptedEngine):
        def start(self) -> None:
            self.starts += 1
            self.listener.on_error("audio-capture")

    engine = _FailingEngine()
    import voice_todo.main as main_module

    monkeypatch.setattr(main_module, "_build_engine", lambda: engine)

    result = typer_testing.CliRunner().invoke(app, ["commands"], catch_exceptions=False)

    assert result.exit_code == 1
    assert "audio-capture" in result.stdout
    assert engine.stops == 1
