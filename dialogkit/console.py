"""
Console front end.

A blocking stdin/stdout presenter. Each line waits for Enter; responses and
queries are chosen by number.
"""

from __future__ import annotations

from typing import Callable

from dialogkit.models import LineData
from dialogkit.presentation import (
    AdvanceCallback,
    DialogPresenter,
    QueryPresenter,
    QueryRequest,
    TextReplacer,
)


def _choose(
    options: list[str],
    read: Callable[[str], str],
    write: Callable[[str], None],
) -> int:
    """Prompt until a valid 1-based option number is entered."""
    for i, option in enumerate(options, 1):
        write(f"  {i}. {option}")

    while True:
        answer = read("> ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return int(answer) - 1
        write(f"Choose 1-{len(options)}")


class ConsolePresenter(DialogPresenter):
    """
    Prints dialog lines and reads the player's input.

    Args:
        read: Prompt function (defaults to ``input``)
        write: Output function (defaults to ``print``)
    """

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self.read = read
        self.write = write
        self.lines_shown = 0

    def show_line(
        self,
        line: LineData,
        advance: AdvanceCallback,
        replace_inline_text: TextReplacer,
    ) -> None:
        self.lines_shown += 1
        if line.speaker:
            self.write(f"{line.speaker}: {line.text}")
        else:
            self.write(line.text)

        if line.responses:
            labels = [replace_inline_text(r.text) for r in line.responses]
            choice = _choose(labels, self.read, self.write)
            advance(line.responses[choice].link)
        else:
            self.read("")
            advance("")

    def close(self) -> None:
        self.write("")


class ConsoleQueryPresenter(QueryPresenter):
    """Prints a query and reads the chosen option number."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self.read = read
        self.write = write

    def show_query(self, request: QueryRequest) -> None:
        self.write(f"[{request.text}]")
        if request.description:
            self.write(request.description)
        choice = _choose(request.responses, self.read, self.write)
        request.respond(request.responses[choice])
