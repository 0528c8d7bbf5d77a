"""
Payloads of the events a DialogProcessor publishes.

    DIALOG_STARTED, DIALOG_ENDED  -> SessionEvent
    NODE_ENTERED                  -> NodeEvent
    LINE_STARTED                  -> LineEvent
    QUERY_STARTED                 -> QueryEvent
    FUNCTION_CALLED               -> FunctionEvent
"""

from __future__ import annotations

from dataclasses import dataclass

from dialogkit.models import LineData
from dialogkit.presentation import QueryRequest


@dataclass(frozen=True)
class SessionEvent:
    agent: str
    node: str = ""


@dataclass(frozen=True)
class NodeEvent:
    agent: str
    node: str


@dataclass(frozen=True)
class LineEvent:
    """A line handed to the presenter, keywords already expanded."""
    agent: str
    node: str
    line: LineData


@dataclass(frozen=True)
class QueryEvent:
    agent: str
    node: str
    request: QueryRequest


@dataclass(frozen=True)
class FunctionEvent:
    """A ``callFunction`` about to be offered to the responders."""
    agent: str
    name: str
    parameter: str
