import logging

import pytest

from voice_todo.commands import CommandBoard, CommandBoardListener, PhraseCommandSet, compile_template


def test_board_defaults_and_greeting() -> None:
    board = CommandBoard()

    assert board.background == "white"
    assert board.handle("hello") == "hii"
    assert board.output == "hii"


def test_add_todo_and_item_placeholder() -> None:
    board = CommandBoard()

    assert board.handle("add todo") == "todo added"
    assert board.handle("add milk to list") == "milk added"
    assert board.output == "milk added"


def test_change_color_updates_background() -> None:
    board = CommandBoard()

    board.handle("Change color to Blue.")

    assert board.background == "blue"
    assert board.output == "blue"


def test_unmatched_phrase_leaves_board_untouched() -> None:
    board = CommandBoard()
    board.handle("hello")

    assert board.handle("add milk and eggs to list") is None
    assert board.handle("hello there") is None
    assert board.output == "hii"
    assert board.background == "white"


def test_first_registered_template_wins() -> None:
    commands = PhraseCommandSet()
    commands.add("open :thing", lambda thing: f"generic {thing}")
    commands.add("open door", lambda: "specific")

    assert commands.handle("open door") == "generic door"
    assert commands.templates == ["open :thing", "open door"]


def test_matched_phrase_is_logged_at_info(caplog) -> None:
    caplog.set_level(logging.INFO, logger="voice_todo.commands")
    board = CommandBoard()

    assert board.handle("add bread to list") == "bread added"

    record = next(item for item in caplog.records if item.getMessage() == "command_matched")
    assert record.template == "add :item to list"
    assert record.placeholders == {"item": "bread"}


def test_whitespace_is_normalized() -> None:
    commands = PhraseCommandSet()
    commands.add("say :word", lambda word: word)

    assert commands.handle("  say    hi!  ") == "hi"


def test_empty_template_is_rejected() -> None:
    with pytest.raises(ValueError):
        compile_template("   ")


def test_listener_forwards_results_to_board() -> None:
    board = CommandBoard()
    updates: list[tuple[str, str | None]] = []
    listener = CommandBoardListener(board, lambda heard, response: updates.append((heard, response)))

    listener.on_speech_end()
    listener.on_result("change color to green")
    listener.on_result("goodbye")
    listener.on_error("network")

    assert updates == [("change color to green", "green"), ("goodbye", None)]
    assert board.background == "green"
    assert listener.errors == ["network"]


def test_listener_reports_failures_to_callback() -> None:
    failures: list[str] = []
    listener = CommandBoardListener(CommandBoard(), on_failure=failures.append)

    listener.on_error("audio-capture")

    assert failures == ["audio-capture"]
