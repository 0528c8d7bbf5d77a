"""
Dialog module - branching dialog scripts.

Provides:
- Text script parser and JSON data models
- Variable store and expression evaluator
- Dialog processor (state machine) with keyword substitution
- Agents and responders for script-side functions and keywords
- Presenter interfaces and a console front end
"""

from dialogkit.models import (
    DialogData,
    NodeData,
    LineData,
    ResponseData,
    VarData,
    QueryData,
    InlineImage,
)
from dialogkit.variables import VariableStore
from dialogkit.expressions import (
    ExpressionEvaluator,
    try_execute_math_f,
    try_execute_math_i,
    try_compare_math_f,
    try_compare_math_i,
)
from dialogkit.parser import ScriptParser, parse_script, format_link, compile_dialog_file
from dialogkit.keywords import KeywordSubstitution
from dialogkit.responders import (
    DialogResponder,
    KeywordResponder,
    DialogAgent,
    DialogSource,
    STATIC_DIALOG_ID,
)
from dialogkit.presentation import DialogPresenter, QueryPresenter, QueryRequest
from dialogkit.processor import DialogProcessor, DialogState, SpeakerType, get_speaker_type
from dialogkit.events import SessionEvent, NodeEvent, LineEvent, QueryEvent, FunctionEvent
from dialogkit.library import DialogLibrary
from dialogkit.console import ConsolePresenter, ConsoleQueryPresenter

__all__ = [
    # Models
    "DialogData",
    "NodeData",
    "LineData",
    "ResponseData",
    "VarData",
    "QueryData",
    "InlineImage",
    # Variables
    "VariableStore",
    "ExpressionEvaluator",
    "try_execute_math_f",
    "try_execute_math_i",
    "try_compare_math_f",
    "try_compare_math_i",
    # Parsing
    "ScriptParser",
    "parse_script",
    "format_link",
    "compile_dialog_file",
    "KeywordSubstitution",
    # Agents
    "DialogResponder",
    "KeywordResponder",
    "DialogAgent",
    "DialogSource",
    "STATIC_DIALOG_ID",
    # Presentation
    "DialogPresenter",
    "QueryPresenter",
    "QueryRequest",
    "ConsolePresenter",
    "ConsoleQueryPresenter",
    # Processor
    "DialogProcessor",
    "DialogState",
    "SpeakerType",
    "get_speaker_type",
    # Event payloads
    "SessionEvent",
    "NodeEvent",
    "LineEvent",
    "QueryEvent",
    "FunctionEvent",
    "DialogLibrary",
]
