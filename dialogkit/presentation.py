"""
Presentation interfaces.

The processor never draws anything. It hands lines and queries to a
presenter and waits for the presenter to call back. Typing effects,
portraits, audio and input all live on the presenter side.

Usage:
    class MyPresenter(DialogPresenter):
        def show_line(self, line, advance, replace_inline_text):
            ui.show(replace_inline_text(line.text))
            ui.on_click(lambda: advance(""))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable

from dialogkit.models import LineData

# Continue the dialog; pass a node name to jump, "" to continue normally
AdvanceCallback = Callable[[str], None]

# Expand <<keyword>> spans in presenter-side text
TextReplacer = Callable[[str], str]


@dataclass
class QueryRequest:
    """
    A modal prompt for the query UI.

    Attributes:
        text: Prompt text, keywords already expanded
        description: Secondary text, keywords already expanded
        responses: Option labels, keywords already expanded
        respond: Call once with the chosen label
    """
    text: str
    description: str = ""
    responses: list[str] = field(default_factory=list)
    respond: Callable[[str], None] = lambda response: None


class DialogPresenter(ABC):
    """
    Displays dialog lines.

    The processor is suspended after ``show_line`` until ``advance`` is
    called. ``advance`` is only honored once per line.
    """

    @abstractmethod
    def show_line(
        self,
        line: LineData,
        advance: AdvanceCallback,
        replace_inline_text: TextReplacer,
    ) -> None:
        """
        Present a dialog line.

        Args:
            line: Line with speaker, text and portrait already substituted
            advance: Continue the dialog; pass a response link if one was chosen
            replace_inline_text: Expand keywords in any other text (responses)
        """

    def close(self) -> None:
        """
        Called when the dialog session ends.

        Override to hide the dialog window.
        """
        pass


class QueryPresenter(ABC):
    """Displays modal queries."""

    @abstractmethod
    def show_query(self, request: QueryRequest) -> None:
        """Present a query. Call ``request.respond`` with the chosen label."""
