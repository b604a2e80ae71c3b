"""CLI startup entrypoint for the voice to-do demos."""

from __future__ import annotations

import asyncio

import typer
from rich import print

from voice_todo.commands import CommandBoard, CommandBoardListener
from voice_todo.config import settings
from voice_todo.listening import ListeningController
from voice_todo.models import ListeningState, SessionOutcome, ToDoList
from voice_todo.telemetry import configure_logging
from voice_todo.voice import RecognitionEngine, VoiceOutputConfig, VoiceOutputService

app = typer.Typer(help="Voice to-do and phrase-command demos")

_QUIT_WORDS = {"q", "quit", "exit"}
_STOP_PHRASES = {"stop", "stop listening"}


class _ConsoleObserver:
    """Prints session progress and resolves a waiter when the session is idle again."""

    def __init__(self) -> None:
        self.waiter: asyncio.Future[ListeningState] | None = None

    def on_state_change(self, state: ListeningState) -> None:
        if state is ListeningState.LISTENING:
            print({"state": state.value, "hint": "Speak your to-do, then stay quiet to save it."})
        elif state is ListeningState.IDLE and self.waiter is not None and not self.waiter.done():
            self.waiter.set_result(state)

    def on_transcript_update(self, text: str) -> None:
        print({"heard": text})

    def on_todo_committed(self, text: str) -> None:
        print({"todo_added": text})


def _build_engine() -> RecognitionEngine:
    from voice_todo.voice.stt_speechrecognition import SpeechRecognitionEngine

    return SpeechRecognitionEngine(
        language=settings.language,
        phrase_time_limit=settings.phrase_time_limit,
        adjust_noise_seconds=settings.ambient_noise_seconds,
    )


def _build_speech_output() -> VoiceOutputService:
    from voice_todo.voice.tts_pyttsx3 import Pyttsx3AudioOutputDevice

    device = Pyttsx3AudioOutputDevice(voice_id=settings.voice_id, rate=settings.speech_rate)
    return VoiceOutputService(device, VoiceOutputConfig.from_settings(settings))


async def _listen_once(controller: ListeningController, observer: _ConsoleObserver) -> SessionOutcome | None:
    observer.waiter = asyncio.get_running_loop().create_future()
    controller.start()
    try:
        await observer.waiter
    finally:
        observer.waiter = None
        controller.close()
    return controller.last_outcome


async def _run_board(engine: RecognitionEngine, board: CommandBoard) -> str | None:
    """Listen until a stop phrase or a recognition error; returns the error code, if any."""
    stopped: asyncio.Future[str | None] = asyncio.get_running_loop().create_future()

    def _on_update(heard: str, response: str | None) -> None:
        if heard.strip().lower() in _STOP_PHRASES:
            if not stopped.done():
                stopped.set_result(None)
            return
        print({"heard": heard, "output": response, "background": board.background})

    def _on_failure(code: str) -> None:
        if not stopped.done():
            stopped.set_result(code)

    engine.attach(CommandBoardListener(board, _on_update, on_failure=_on_failure))
    engine.start()
    try:
        return await stopped
    finally:
        engine.stop()


@app.command()
def config() -> None:
    """Show effective runtime configuration."""
    print(settings.model_dump())


@app.command()
def listen(
    silence_timeout: float | None = typer.Option(None, help="Seconds of quiet before a to-do is saved"),
    no_input_timeout: float | None = typer.Option(None, help="Seconds to wait for any speech"),
) -> None:
    """Capture spoken to-dos; each session saves after a pause in speech."""
    configure_logging(settings.log_level)

    try:
        engine = _build_engine()
        speech = _build_speech_output()
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    except ImportError:
        print({"error": "Voice extras are missing. Install with: pip install 'voice-todo[voice]'"})
        raise typer.Exit(code=1)

    todos = ToDoList()
    observer = _ConsoleObserver()
    try:
        controller = ListeningController(
            engine,
            speech,
            todos,
            observer=observer,
            silence_timeout_seconds=settings.silence_timeout_seconds if silence_timeout is None else silence_timeout,
            no_input_timeout_seconds=settings.no_input_timeout_seconds if no_input_timeout is None else no_input_timeout,
            acknowledgement=settings.acknowledgement,
        )
    except ValueError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    print({"voice_todo": "started", "hint": "Press Enter to start listening; type q to quit."})
    while True:
        try:
            reply = input("Press Enter to listen ... ")
        except (EOFError, KeyboardInterrupt):
            break
        if reply.strip().lower() in _QUIT_WORDS:
            break

        try:
            outcome = asyncio.run(_listen_once(controller, observer))
        except KeyboardInterrupt:
            break
        if outcome is not None and outcome.committed is None:
            print({"discarded": outcome.reason.value})

    controller.close()
    print({"voice_todo": "stopped", "todos": list(todos)})


@app.command()
def commands(
    typed: bool = typer.Option(False, help="Read phrases from the keyboard instead of the microphone"),
) -> None:
    """Drive the phrase-command board by voice or by typing."""
    configure_logging(settings.log_level)
    board = CommandBoard()
    print({"commands": board.commands.templates, "hint": "Say or type 'stop' to exit."})

    if typed:
        while True:
            try:
                line = input("> ")
            except (EOFError, KeyboardInterrupt):
                break
            if line.strip().lower() in _STOP_PHRASES:
                break
            print({"heard": line, "output": board.handle(line), "background": board.background})
        return

    try:
        engine = _build_engine()
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    except ImportError:
        print({"error": "Voice extras are missing. Install with: pip install 'voice-todo[voice]'"})
        raise typer.Exit(code=1)

    try:
        error_code = asyncio.run(_run_board(engine, board))
    except KeyboardInterrupt:
        return
    if error_code is not None:
        print({"error": f"Speech recognition failed: {error_code}"})
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
