"""
Dialog processor - runs dialog scripts line by line.

The processor walks a DialogData graph for one agent at a time. It applies
variable writes and function calls, resolves conditionals, and hands
ordinary lines to a presenter. It then suspends until the presenter calls
the advance callback it was given.

States:
    IDLE -> RUNNING -> AWAITING_EXTERNAL -> RUNNING -> ... -> IDLE

Usage:
    processor = DialogProcessor(VariableStore(), presenter=MyPresenter())
    processor.on_exit_dialog(lambda: print("done"))
    agent.initiate_dialog(processor)
"""

from __future__ import annotations

import logging
import time
from enum import Enum, auto
from typing import Callable, Optional

from talkengine.core.config import EngineConfig
from talkengine.core.events import DialogEvent, EventBus
from dialogkit.events import FunctionEvent, LineEvent, NodeEvent, QueryEvent, SessionEvent
from dialogkit.expressions import ExpressionEvaluator, format_number
from dialogkit.keywords import KeywordSubstitution
from dialogkit.models import InlineImage, LineData, NodeData, QueryData, VarData
from dialogkit.presentation import (
    AdvanceCallback,
    DialogPresenter,
    QueryPresenter,
    QueryRequest,
    TextReplacer,
)
from dialogkit.responders import DialogAgent, DialogResponder
from dialogkit.variables import VariableStore

logger = logging.getLogger(__name__)

LineCallback = Callable[[LineData, AdvanceCallback, TextReplacer], None]


class DialogState(Enum):
    """Execution state of the processor."""
    IDLE = auto()
    RUNNING = auto()
    AWAITING_EXTERNAL = auto()


class SpeakerType(Enum):
    """Who is speaking a line."""
    PLAYER = auto()
    SELF = auto()
    OTHER = auto()


def get_speaker_type(speaker: str) -> SpeakerType:
    """Classify a speaker string by the ``player`` / ``self`` markers it contains."""
    if "player" in speaker:
        return SpeakerType.PLAYER
    if "self" in speaker:
        return SpeakerType.SELF
    return SpeakerType.OTHER


class DialogProcessor(DialogResponder):
    """
    Runs one dialog session at a time.

    The processor is itself the first responder consulted for keywords and
    functions. It handles ``<<player>>``, ``<<self>>`` and the built-in
    functions ``DisableDialog``, ``Math``, ``MathInt``, ``Compare`` and
    ``CompareInt``.

    Args:
        variables: Shared variable store (one is created from
            ``config.initial_vars`` if omitted)
        presenter: Receives dialog lines
        query_presenter: Receives query prompts
        event_bus: Optional bus for DialogEvent notifications
        config: Engine configuration
        clock: Monotonic time source, in seconds
    """

    def __init__(
        self,
        variables: Optional[VariableStore] = None,
        presenter: Optional[DialogPresenter] = None,
        query_presenter: Optional[QueryPresenter] = None,
        event_bus: Optional[EventBus] = None,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or EngineConfig()
        self.variables = variables if variables is not None else VariableStore(self.config.initial_vars)
        self.presenter = presenter
        self.query_presenter = query_presenter
        self.event_bus = event_bus
        self.evaluator = ExpressionEvaluator(self.variables)
        self._clock = clock

        self._state = DialogState.IDLE
        self._agent: Optional[DialogAgent] = None
        self._node: Optional[NodeData] = None
        self._line_index = 0
        self._on_exit: Optional[Callable[[], None]] = None
        self._inactive_at = float('-inf')
        self._in_run = False
        # Incremented whenever a suspension point is created or invalidated
        self._token = 0

        self._responders: list[DialogResponder] = []
        self._node_history: list[str] = []

        self._initiate_callbacks: list[Callable[[], None]] = []
        self._exit_callbacks: list[Callable[[], None]] = []
        self._line_callbacks: list[LineCallback] = []

    # Properties

    @property
    def state(self) -> DialogState:
        return self._state

    @property
    def agent(self) -> Optional[DialogAgent]:
        """Agent owning the running session."""
        return self._agent

    @property
    def current_node(self) -> Optional[NodeData]:
        return self._node

    @property
    def line_index(self) -> int:
        return self._line_index

    @property
    def current_line(self) -> Optional[LineData]:
        if self._node is None or not 0 <= self._line_index < len(self._node.lines):
            return None
        return self._node.lines[self._line_index]

    @property
    def is_active(self) -> bool:
        """True during a session and for a short grace period after it ends."""
        return self._state != DialogState.IDLE or self._clock() < self._inactive_at

    @property
    def player_name(self) -> str:
        return self.config.player_name

    @player_name.setter
    def player_name(self, value: str) -> None:
        self.config.player_name = value

    @property
    def node_history(self) -> list[str]:
        """Node name of every line shown this session, in order."""
        return list(self._node_history)

    @property
    def responders(self) -> list[DialogResponder]:
        return list(self._responders)

    # Registration

    def add_responder(self, responder: DialogResponder) -> None:
        if responder not in self._responders:
            self._responders.append(responder)

    def remove_responder(self, responder: DialogResponder) -> bool:
        if responder not in self._responders:
            return False
        self._responders.remove(responder)
        return True

    def on_initiate_dialog(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback for session start. Returns the callback."""
        self._initiate_callbacks.append(callback)
        return callback

    def on_exit_dialog(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback for session end. Returns the callback."""
        self._exit_callbacks.append(callback)
        return callback

    def on_line(self, callback: LineCallback) -> LineCallback:
        """Register a callback receiving every shown line. Returns the callback."""
        self._line_callbacks.append(callback)
        return callback

    # Session control

    def initiate(
        self,
        agent: Optional[DialogAgent],
        on_exit: Optional[Callable[[], None]] = None,
    ) -> bool:
        """
        Start a session for an agent.

        The agent's script must already be built (see
        ``DialogAgent.initiate_dialog``).

        Args:
            agent: Agent whose script to run
            on_exit: Called once when this session ends

        Returns:
            True if the session started
        """
        if agent is None:
            logger.warning("Cannot initiate dialog without an agent")
            return False

        if self._state != DialogState.IDLE:
            logger.warning(
                f"Cannot initiate dialog for '{agent.id}': "
                f"a dialog with '{self._agent.id if self._agent else '?'}' is running"
            )
            return False

        self._node_history.clear()
        node = agent.data.get_start_node()
        if node is None:
            logger.warning(f"Agent '{agent.id}' has no dialog nodes")
            return False

        self.variables.increment_count(agent.id)
        self._agent = agent
        self._node = node
        self._line_index = 0
        self._on_exit = on_exit
        self._state = DialogState.RUNNING

        logger.info(f"Dialog started: {agent.id} at node '{node.name}'")
        for callback in list(self._initiate_callbacks):
            callback()
        self._publish(DialogEvent.DIALOG_STARTED, SessionEvent(agent.id, node.name))
        self._publish(DialogEvent.NODE_ENTERED, NodeEvent(agent.id, node.name))

        self._run()
        return True

    def advance(self, link: str = "") -> bool:
        """
        Continue from the line or query currently awaiting the presenter.

        Equivalent to calling the advance callback that was handed out.

        Returns:
            False if nothing was awaiting an advance
        """
        return self._resume(self._token, link)

    def kill_dialog(self) -> None:
        """End the running session immediately."""
        if self._state == DialogState.IDLE:
            logger.debug("kill_dialog called with no running dialog")
            return
        self._exit()

    # Responder interface

    def get_keyword(self, key: str) -> Optional[str]:
        if key == "player" and self.config.player_name:
            return self.config.player_name
        if key == "self" and self._agent is not None:
            return self._agent.display_name
        return None

    def dialog_function(self, call: str, parameter: str) -> tuple[bool, Optional[str]]:
        if call == "DisableDialog":
            if self._agent is not None:
                self._agent.enabled = False
            return True, None

        if call in ("Math", "MathInt"):
            if call == "Math":
                ok, value = self.evaluator.try_execute_math_f(parameter)
            else:
                ok, value = self.evaluator.try_execute_math_i(parameter)
            if not ok:
                logger.debug(f"{call} could not evaluate '{parameter}'")
                return False, None
            return True, format_number(value)

        if call in ("Compare", "CompareInt"):
            if call == "Compare":
                ok, result = self.evaluator.try_compare_math_f(parameter)
            else:
                ok, result = self.evaluator.try_compare_math_i(parameter)
            if not ok:
                logger.debug(f"{call} could not evaluate '{parameter}'")
                return False, None
            return True, "true" if result else "false"

        return False, None

    def get_inline_images(self) -> list[InlineImage]:
        """Inline image replacements from the agent and every responder."""
        images: list[InlineImage] = []
        if self._agent is not None:
            images.extend(self._agent.get_inline_images())
        for responder in self._responders:
            if responder is not self._agent:
                images.extend(responder.get_inline_images())
        return images

    def replace_inline_text(self, text: str) -> str:
        """Expand ``<<keyword>>`` spans in ``text``."""
        substitution = KeywordSubstitution(
            self._resolve_keyword,
            limit=self.config.keyword_expansion_limit,
        )
        return substitution.replace(text)

    def _handlers(self) -> list[DialogResponder]:
        """The processor, then the agent, then every other responder."""
        handlers: list[DialogResponder] = [self]
        if self._agent is not None:
            handlers.append(self._agent)
        handlers.extend(r for r in self._responders if r is not self._agent)
        return handlers

    def _resolve_keyword(self, key: str) -> Optional[str]:
        for handler in self._handlers():
            value = handler.get_keyword(key)
            if value is not None:
                return value
        return None

    # Execution

    def _run(self) -> None:
        """Execute lines until the session suspends or ends."""
        if self._in_run:
            # Re-entered from a presenter or callback; the outer loop continues
            return

        self._in_run = True
        try:
            while self._state == DialogState.RUNNING:
                self._run_line()
        finally:
            self._in_run = False

    def _run_line(self) -> None:
        line = self.current_line
        if line is None:
            self._exit()
            return

        self._set_var(line.set_var)
        self._call_function(line.call_function)
        if self._state != DialogState.RUNNING:
            return

        if line.if_var:
            self._branch(self._check_var(line.if_var))
        elif line.if_function:
            self._branch(self._check_function(line.if_function))
        elif line.query.is_valid:
            self._start_query(line.query)
        elif line.if_dialog_count:
            self._branch(self._check_dialog_count(line.if_dialog_count))
        elif line.else_if:
            # Reached after a branch ran: skip the remaining alternatives
            self._pass_over_if()
        elif line.end_if:
            self._move_cursor()
        elif line.exit:
            self._exit()
        elif line.is_silent:
            self._move_cursor()
        else:
            self._show_line(line)

    def _branch(self, result: bool) -> None:
        logger.debug(f"Condition at {self._node.name}[{self._line_index}] -> {result}")
        if result:
            self._move_cursor()
        else:
            self._pass_over_if()

    def _move_cursor(self, link: str = "") -> None:
        """
        Step past the current line.

        An explicit link wins over the line's own link. Links naming no node
        are ignored. Without a link the cursor moves to the next line.
        """
        target = self._find_node(link)
        if target is None:
            line = self.current_line
            if line is not None:
                target = self._find_node(line.link)

        if target is not None:
            self._enter_node(target)
        else:
            self._line_index += 1

    def _pass_over_if(self) -> None:
        """
        Skip a failed branch.

        Stops at the next else-if or end-if. An else-if with a condition is
        evaluated next; a bare else-if or an end-if is stepped past.
        """
        lines = self._node.lines
        index = self._line_index + 1
        while index < len(lines):
            line = lines[index]
            if line.else_if or line.end_if:
                self._line_index = index
                if not (line.else_if and line.has_condition):
                    self._move_cursor()
                return
            index += 1

        # Fell off the end of the node
        self._line_index = len(lines)

    def _find_node(self, name: str) -> Optional[NodeData]:
        if not name or self._agent is None:
            return None
        return self._agent.data.get_node(name)

    def _enter_node(self, node: NodeData) -> None:
        logger.debug(f"Jump to node '{node.name}'")
        self._node = node
        self._line_index = 0
        self._publish(DialogEvent.NODE_ENTERED, NodeEvent(self._agent.id, node.name))

    # Line actions

    def _set_var(self, var: VarData) -> None:
        if var.key:
            self.variables.set(var.key, var.value)

    def _split_call(self, call: str) -> tuple[str, str]:
        name, _, parameter = call.partition("::")
        if parameter:
            parameter = self.replace_inline_text(parameter)
        return name, parameter

    def _call_function(self, call: str) -> None:
        """Offer a call to the processor, the agent and every other responder."""
        if not call:
            return

        name, parameter = self._split_call(call)
        logger.debug(f"Calling {name}({parameter!r})")
        self._publish(DialogEvent.FUNCTION_CALLED, FunctionEvent(self._agent.id, name, parameter))

        for handler in self._handlers():
            handler.dialog_function(name, parameter)

    def _check_var(self, condition: str) -> bool:
        parts = condition.split("=")
        if len(parts) != 2:
            return False
        found, value = self.variables.try_get(parts[0].strip())
        return found and value == parts[1].strip()

    def _check_function(self, condition: str) -> bool:
        """
        Evaluate ``name::param=desired``, ``name::param``, ``name=desired``
        or ``name``. The first responder that handles the call decides.
        """
        name, sep, rest = condition.partition("::")
        if sep:
            if "=" in rest:
                parameter, _, desired = rest.rpartition("=")
                if not desired:
                    return False
            else:
                parameter, desired = rest, ""
        else:
            name, eq, desired = condition.partition("=")
            parameter = ""
            if eq and not desired:
                return False

        if not name:
            return False

        if parameter:
            parameter = self.replace_inline_text(parameter)
        if desired:
            desired = self.replace_inline_text(desired)
        desired = desired.lower()

        for handler in self._handlers():
            handled, result = handler.dialog_function(name, parameter)
            if handled:
                return (result or "").lower() == desired
        return False

    def _check_dialog_count(self, condition: str) -> bool:
        if len(condition) <= 1 or self._agent is None:
            return False

        op, number = condition[0], condition[1:]
        try:
            target = int(number)
        except ValueError:
            return False

        count = self.variables.get_count(self._agent.id)
        if op == "<":
            return count < target
        if op == ">":
            return count > target
        if op == "=":
            return count == target
        return False

    # Suspension points

    def _suspend(self) -> int:
        self._state = DialogState.AWAITING_EXTERNAL
        self._token += 1
        return self._token

    def _resume(self, token: int, link: str = "") -> bool:
        if token != self._token or self._state != DialogState.AWAITING_EXTERNAL:
            logger.warning("Ignoring advance: no line is awaiting it")
            return False

        # Consume the token so the same callback cannot advance twice
        self._token += 1
        self._state = DialogState.RUNNING
        self._move_cursor(link)
        self._run()
        return True

    def _show_line(self, line: LineData) -> None:
        self._node_history.append(self._node.name)

        shown = line.model_copy(
            update={
                "speaker": self.replace_inline_text(line.speaker),
                "text": self.replace_inline_text(line.text),
                "portrait": self.replace_inline_text(line.portrait),
            },
            deep=True,
        )

        token = self._suspend()

        def advance(link: str = "") -> None:
            self._resume(token, link)

        self._publish(DialogEvent.LINE_STARTED, LineEvent(self._agent.id, self._node.name, shown))

        if self.presenter is None and not self._line_callbacks:
            logger.warning("Dialog line shown with no presenter or line callback")

        if self.presenter is not None:
            self.presenter.show_line(shown, advance, self.replace_inline_text)
        for callback in list(self._line_callbacks):
            callback(shown, advance, self.replace_inline_text)

    def _start_query(self, query: QueryData) -> None:
        if self.query_presenter is None:
            logger.warning("Query reached with no query presenter; skipping it")
            self._move_cursor()
            return

        token = self._suspend()
        labels = [self.replace_inline_text(response.text) for response in query.responses]

        def respond(label: str) -> None:
            self._on_query_response(token, query, labels, label)

        request = QueryRequest(
            text=self.replace_inline_text(query.text),
            description=self.replace_inline_text(query.description),
            responses=list(labels),
            respond=respond,
        )
        self._publish(DialogEvent.QUERY_STARTED, QueryEvent(self._agent.id, self._node.name, request))
        self.query_presenter.show_query(request)

    def _on_query_response(
        self,
        token: int,
        query: QueryData,
        labels: list[str],
        label: str,
    ) -> None:
        if token != self._token:
            logger.warning(f"Ignoring stale query response '{label}'")
            return

        link = ""
        for response, shown_label in zip(query.responses, labels):
            if shown_label == label:
                link = response.link
                break
        else:
            logger.warning(f"Query response '{label}' matches no option")
        self._resume(token, link)

    # Teardown

    def _exit(self) -> None:
        if self._state == DialogState.IDLE:
            return

        agent = self._agent
        node = self._node
        on_exit = self._on_exit

        self._agent = None
        self._node = None
        self._line_index = 0
        self._on_exit = None
        self._state = DialogState.IDLE
        self._token += 1
        self._inactive_at = self._clock() + self.config.exit_grace_delay

        logger.info(f"Dialog ended: {agent.id if agent else '?'}")

        if self.presenter is not None:
            self.presenter.close()
        for callback in list(self._exit_callbacks):
            callback()
        self._publish(
            DialogEvent.DIALOG_ENDED,
            SessionEvent(agent.id if agent else "", node.name if node else ""),
        )
        if on_exit is not None:
            on_exit()

    def _publish(self, event_type: DialogEvent, payload: object) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, payload)
