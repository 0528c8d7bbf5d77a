"""
Dialog data models - scripts, nodes, lines, responses.

These are the canonical graph produced by the text parser or loaded from
JSON. Field names serialize in camelCase (``ifVar``, ``windowType``) so JSON
written by other tools loads unchanged.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from talkengine.core.component import DataModel


class ResponseData(DataModel):
    """A single response option: the label shown and the node it jumps to."""
    text: str = ""
    link: str = ""


class VarData(DataModel):
    """A variable assignment. Values are always strings."""
    key: str = ""
    value: str = ""


class QueryData(DataModel):
    """
    A modal prompt handled by a separate query UI.

    The chosen response's ``link`` decides where the dialog resumes.
    """
    text: str = ""
    description: str = ""
    responses: list[ResponseData] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return bool(self.text) and len(self.responses) > 0


class InlineImage(DataModel):
    """Text to be swapped for an image by a presenter."""
    text_to_replace: str = ""
    image: str = ""
    scale: float = Field(default=1.0, gt=0)


class LineData(DataModel):
    """
    One executable step of a node.

    Attributes:
        speaker, text, portrait, typing, sound, voice: Presentation fields
        link: Node to jump to after this line completes
        responses: Choices offered after the line
        exit: End the dialog when this line is reached
        if_var: ``"key=value"`` variable test
        if_function: ``"name::param=desiredResult"`` function test
        if_dialog_count: ``"<N"``, ``">N"`` or ``"=N"`` visit-count test
        else_if: Marks the start of an alternative branch
        end_if: Marks the end of a conditional block
        set_var: Variable written whenever the line runs
        call_function: ``"name::param"`` call made whenever the line runs
        query: Modal prompt that replaces the normal response flow
        data: Opaque passthrough
    """
    speaker: str = ""
    text: str = ""
    portrait: str = ""
    typing: str = ""
    sound: str = ""
    voice: str = ""

    link: str = ""
    responses: list[ResponseData] = Field(default_factory=list)
    exit: bool = False

    if_var: str = ""
    if_function: str = ""
    if_dialog_count: str = ""
    else_if: bool = False
    end_if: bool = False

    set_var: VarData = Field(default_factory=VarData)
    call_function: str = ""
    query: QueryData = Field(default_factory=QueryData)

    data: str = ""

    @property
    def has_condition(self) -> bool:
        """True if the line carries a conditional the processor evaluates."""
        return bool(
            self.if_var
            or self.if_function
            or self.query.is_valid
            or self.if_dialog_count
        )

    @property
    def is_silent(self) -> bool:
        """True if there is nothing to show for this line."""
        return not self.speaker and not self.text


class NodeData(DataModel):
    """A named, ordered sequence of lines. The name is the jump target."""
    name: str = ""
    lines: list[LineData] = Field(default_factory=list)
    data: str = ""


class DialogData(DataModel):
    """
    A complete dialog script.

    Attributes:
        start: Name of the first node (falls back to the first node)
        nodes: All nodes; order does not matter for execution
        window_type: Opaque metadata for the presenter
        data: Opaque passthrough
    """
    start: str = ""
    nodes: list[NodeData] = Field(default_factory=list)
    window_type: str = ""
    data: str = ""

    @property
    def is_empty(self) -> bool:
        """An empty script must be (re)built from its source before use."""
        return (
            not self.nodes
            and not self.start
            and not self.window_type
            and not self.data
        )

    def get_node(self, name: str) -> Optional[NodeData]:
        """Get a node by name, or None if no node has that name."""
        if not name:
            return None
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    def get_start_node(self) -> Optional[NodeData]:
        """The ``start`` node, falling back to the first node."""
        node = self.get_node(self.start)
        if node is None and self.nodes:
            node = self.nodes[0]
        return node

    @classmethod
    def from_json(cls, text: str) -> DialogData:
        """Parse a JSON dialog. Raises pydantic.ValidationError on bad input."""
        return cls.model_validate_json(text)

    @classmethod
    def from_dict(cls, data: dict) -> DialogData:
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_defaults=True)
