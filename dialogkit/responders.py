"""
Responders and dialog agents.

A responder is anything the processor consults for ``<<keyword>>``
replacement, function calls and inline images. An agent is the responder
that owns a dialog script.

Usage:
    class Shopkeeper(DialogAgent):
        def dialog_function(self, call, parameter):
            if call == "HasGold":
                return True, str(wallet.gold >= int(parameter))
            return False, None

    shop = Shopkeeper("shopkeeper", keywords={"shop": "The Rusty Anchor"})
    shop.set_text_data(open("shop.dlg").read())
    shop.initiate_dialog(processor)
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Optional

from pydantic import ValidationError

from dialogkit.models import DialogData, InlineImage, LineData, NodeData
from dialogkit.parser import parse_script

if TYPE_CHECKING:
    from dialogkit.processor import DialogProcessor

logger = logging.getLogger(__name__)

# Agent id used for the visit counter of single-line dialogs
STATIC_DIALOG_ID = "Static Dialog"


class DialogResponder:
    """
    Base class for objects the processor consults.

    Every hook is optional. Override the ones you need.
    """

    def dialog_function(self, call: str, parameter: str) -> tuple[bool, Optional[str]]:
        """
        Handle a script function call.

        Args:
            call: Function name
            parameter: Parameter with keywords already expanded

        Returns:
            ``(handled, result)``. ``result`` is compared case-insensitively
            against the desired result of ``IF FUNCTION`` lines.
        """
        return False, None

    def get_keyword(self, key: str) -> Optional[str]:
        """Return the replacement for ``<<key>>``, or None if unknown."""
        return None

    def get_inline_images(self) -> list[InlineImage]:
        """Return text-to-image replacements for presenters."""
        return []


class KeywordResponder(DialogResponder):
    """
    A responder backed by plain tables.

    Args:
        keywords: Keyword replacements
        functions: Function name -> callable taking the parameter and
            returning a result string (or None)
        inline_images: Inline image replacements
    """

    def __init__(
        self,
        keywords: Optional[dict[str, str]] = None,
        functions: Optional[dict[str, Callable[[str], Optional[str]]]] = None,
        inline_images: Optional[list[InlineImage]] = None,
    ):
        self.keywords = dict(keywords or {})
        self.functions = dict(functions or {})
        self.inline_images = list(inline_images or [])

    def dialog_function(self, call: str, parameter: str) -> tuple[bool, Optional[str]]:
        func = self.functions.get(call)
        if func is None:
            return False, None
        return True, func(parameter)

    def get_keyword(self, key: str) -> Optional[str]:
        return self.keywords.get(key)

    def get_inline_images(self) -> list[InlineImage]:
        return list(self.inline_images)


class DialogSource(Enum):
    """Where an agent builds its script from."""
    DATA = auto()
    JSON = auto()
    STATIC_TEXT = auto()
    TEXT_SCRIPT = auto()


class DialogAgent(KeywordResponder):
    """
    Owner of a dialog script.

    The script is built lazily from the configured source the first time a
    dialog starts, and rebuilt only after ``clear_data`` or a source change.

    Attributes:
        name: Agent name, also its id for visit counting
        enabled: Cleared by the ``DisableDialog`` script function
        data: The built script (empty until built)
        source: Which source ``build_data`` reads
    """

    def __init__(
        self,
        name: str,
        display_name: str = "",
        keywords: Optional[dict[str, str]] = None,
        functions: Optional[dict[str, Callable[[str], Optional[str]]]] = None,
        inline_images: Optional[list[InlineImage]] = None,
        strict_responses: bool = False,
    ):
        super().__init__(keywords, functions, inline_images)
        self.name = name
        self._display_name = display_name
        self._id = name
        self.enabled = True
        self.strict_responses = strict_responses

        self.data = DialogData()
        self.source = DialogSource.DATA
        self._source_data: Optional[DialogData] = None
        self._json = ""
        self._script = ""
        self._script_start = ""
        self._static_text = ""

    def __repr__(self) -> str:
        return f"DialogAgent({self.name!r}, source={self.source.name})"

    @property
    def id(self) -> str:
        """Key of this agent's visit counter in the variable store."""
        return self._id

    @property
    def display_name(self) -> str:
        """Name shown for ``<<self>>``; falls back to ``name``."""
        return self._display_name or self.name

    @display_name.setter
    def display_name(self, value: str) -> None:
        self._display_name = value

    # Sources

    def set_data(self, data: DialogData) -> None:
        self.source = DialogSource.DATA
        self._source_data = data
        self.clear_data()

    def set_json(self, text: str) -> None:
        self.source = DialogSource.JSON
        self._json = text
        self.clear_data()

    def set_static_text(self, text: str) -> None:
        """Use a single unchanging line, e.g. for signs."""
        self.source = DialogSource.STATIC_TEXT
        self._static_text = text
        self.clear_data()

    def set_text_data(self, text: str, start: str = "") -> None:
        """Use a text-format script, optionally overriding its start node."""
        self.source = DialogSource.TEXT_SCRIPT
        self._script = text
        self._script_start = start
        self.clear_data()

    @property
    def static_text(self) -> str:
        return self._static_text if self.source == DialogSource.STATIC_TEXT else ""

    @property
    def text_data_start(self) -> str:
        return self._script_start if self.source == DialogSource.TEXT_SCRIPT else ""

    def clear_data(self) -> None:
        """Force the script to be rebuilt at the next dialog."""
        self.data = DialogData()

    def build_data(self, speaker: str = "") -> bool:
        """
        Build ``data`` from the configured source if it is empty.

        Args:
            speaker: Speaker for a static-text line

        Returns:
            True if ``data`` holds a non-empty script afterwards
        """
        if not self.data.is_empty:
            return True

        if self.source == DialogSource.DATA:
            self._id = self.name
            if self._source_data is None:
                logger.warning(f"Agent '{self.name}' has no dialog data")
                return False
            self.data = self._source_data.clone()

        elif self.source == DialogSource.JSON:
            self._id = self.name
            if not self._json:
                logger.warning(f"Agent '{self.name}' has no dialog JSON")
                return False
            try:
                self.data = DialogData.from_json(self._json)
            except ValidationError as e:
                logger.warning(f"Agent '{self.name}' has invalid dialog JSON: {e.error_count()} error(s)")
                return False

        elif self.source == DialogSource.STATIC_TEXT:
            self._id = STATIC_DIALOG_ID
            self.data = DialogData(nodes=[
                NodeData(lines=[LineData(speaker=speaker, text=self._static_text)])
            ])

        elif self.source == DialogSource.TEXT_SCRIPT:
            self._id = self.name
            if not self._script:
                logger.warning(f"Agent '{self.name}' has no dialog script")
                return False
            self.data = parse_script(self._script, self._script_start, self.strict_responses)

        return not self.data.is_empty

    def initiate_dialog(
        self,
        processor: DialogProcessor,
        speaker: str = "",
        on_exit: Optional[Callable[[], None]] = None,
    ) -> bool:
        """
        Build the script if needed and start a session.

        Args:
            processor: Processor to run the session
            speaker: Speaker for a static-text line
            on_exit: Called once when the session ends

        Returns:
            True if the session started
        """
        self.build_data(speaker)
        return processor.initiate(self, on_exit)
