"""Fixed spoken phrases with ``:name`` placeholders mapped to handlers."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable

CommandHandler = Callable[..., str | None]

_PLACEHOLDER = re.compile(r"^:(\w+)$")
_TRAILING_PUNCTUATION = ".,!?;:"


@dataclass(slots=True)
class PhraseCommand:
    template: str
    pattern: re.Pattern[str]
    handler: CommandHandler


def compile_template(template: str) -> re.Pattern[str]:
    """Turn ``add :item to list`` into a whole-phrase, case-insensitive regex."""
    words = template.split()
    if not words:
        raise ValueError("Command template must contain at least one word")

    parts: list[str] = []
    for word in words:
        placeholder = _PLACEHOLDER.match(word)
        if placeholder:
            parts.append(rf"(?P<{placeholder.group(1)}>\S+)")
        else:
            parts.append(re.escape(word))
    return re.compile(r"^" + r"\s+".join(parts) + r"$", re.IGNORECASE)


class PhraseCommandSet:
    """Ordered phrase templates; the first registered match wins."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._commands: list[PhraseCommand] = []
        self._logger = logger or logging.getLogger("voice_todo.commands")

    def add(self, template: str, handler: CommandHandler) -> None:
        self._commands.append(PhraseCommand(template=template, pattern=compile_template(template), handler=handler))

    def add_commands(self, commands: dict[str, CommandHandler]) -> None:
        for template, handler in commands.items():
            self.add(template, handler)

    @property
    def templates(self) -> list[str]:
        return [command.template for command in self._commands]

    def handle(self, utterance: str) -> str | None:
        """Run the handler for ``utterance`` and return its result, or ``None`` if nothing matched."""
        text = " ".join(utterance.split()).rstrip(_TRAILING_PUNCTUATION)
        for command in self._commands:
            match = command.pattern.match(text)
            if match is None:
                continue
            self._logger.info(
                "command_matched",
                extra={"template": command.template, "placeholders": match.groupdict()},
            )
            return command.handler(**match.groupdict())

        self._logger.debug("command_not_matched", extra={"utterance": text})
        return None


@dataclass(slots=True)
class CommandBoard:
    """Output line and background color driven by the demo phrases."""

    output: str = ""
    background: str = "white"
    commands: PhraseCommandSet = field(default_factory=PhraseCommandSet)

    def __post_init__(self) -> None:
        self.commands.add_commands(
            {
                "hello": self._hello,
                "add todo": self._add_todo,
                "add :item to list": self._add_item,
                "change color to :color": self._change_color,
            }
        )

    def handle(self, utterance: str) -> str | None:
        return self.commands.handle(utterance)

    def _hello(self) -> str:
        self.output = "hii"
        return self.output

    def _add_todo(self) -> str:
        self.output = "todo added"
        return self.output

    def _add_item(self, item: str) -> str:
        self.output = f"{item} added"
        return self.output

    def _change_color(self, color: str) -> str:
        self.background = color.lower()
        self.output = self.background
        return self.output


class CommandBoardListener:
    """Feeds every recognized phrase from an engine into a board."""

    def __init__(
        self,
        board: CommandBoard,
        on_update: Callable[[str, str | None], None] | None = None,
        *,
        on_failure: Callable[[str], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._board = board
        self._on_update = on_update
        self._on_failure = on_failure
        self._logger = logger or logging.getLogger("voice_todo.commands")
        self.errors: list[str] = []

    def on_result(self, text: str) -> None:
        response = self._board.handle(text)
        if self._on_update is not None:
            self._on_update(text, response)

    def on_speech_end(self) -> None:
        pass

    def on_error(self, code: str) -> None:
        self.errors.append(code)
        self._logger.warning("recognition_error", extra={"code": code})
        if self._on_failure is not None:
            self._on_failure(code)
