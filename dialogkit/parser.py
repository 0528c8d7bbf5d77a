"""
Dialog script parser - converts text scripts to DialogData.

Supports a line-oriented text format:

```
=> greeting                     // optional start node (first one wins)

# greeting
Guard: Halt! Who goes there, <<player>>?
- A friend => #friend
- None of your business => #rude

# friend
SET: met_guard = true
IF: has_pass=true => #let_in
COUNT>2 => #regular
IF FUNCTION: HasItem,key=true => #let_in
DO: PlaySound,gate
Guard: Move along.
EXIT
```

Lines are trimmed; blank lines and lines starting with ``/`` are skipped.
Malformed directives are dropped without aborting the parse.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Optional

from dialogkit.models import DialogData, LineData, NodeData, ResponseData, VarData

logger = logging.getLogger(__name__)

ARROW = "=>"


def format_link(link: str) -> str:
    """Normalize a jump target: trim, drop one leading ``#``, trim again."""
    link = link.strip()
    if link.startswith("#"):
        link = link[1:]
    return link.strip()


class ScriptParser:
    """
    Parses dialog scripts from the text format.

    A parser instance holds state only for the duration of one ``parse`` call.

    Args:
        strict_responses: Only attach ``- label => #target`` responses to
            lines with a speaker or text. By default a response attaches to
            whatever line was added last, including directive lines.
    """

    def __init__(self, strict_responses: bool = False):
        self.strict_responses = strict_responses
        self._reset()

    def _reset(self) -> None:
        self._start = ""
        self._started_nodes = False
        self._nodes: list[NodeData] = []
        self._lines: list[LineData] = []
        self._responses: list[ResponseData] = []

    def parse_file(self, path: str | Path, start_override: str = "") -> DialogData:
        """Parse a dialog script file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse(content, start_override)

    def parse(self, text: str, start_override: str = "") -> DialogData:
        """
        Parse a dialog script string.

        Args:
            text: Script source
            start_override: Start node name; wins over any ``=>`` line

        Returns:
            The parsed dialog graph
        """
        self._reset()

        for raw in text.split("\n"):
            self._parse_line(raw.strip())

        self._flush_node()

        dialog = DialogData(
            start=start_override or self._start,
            nodes=self._nodes,
        )
        self._reset()
        return dialog

    def _parse_line(self, line: str) -> None:
        if not line or line.startswith("/"):
            return

        upper = line.upper()

        if not self._started_nodes and line.startswith(ARROW):
            if not self._start:
                self._start = format_link(line[len(ARROW):])
            return

        if upper.startswith("COUNT"):
            self._parse_count(line[len("COUNT"):])
        elif upper.startswith("SET:"):
            self._parse_set(line[len("SET:"):])
        elif upper.startswith("IF FUNCTION:"):
            self._parse_if_function(line[len("IF FUNCTION:"):])
        elif upper.startswith("IF:"):
            self._parse_if(line[len("IF:"):])
        elif upper.startswith("DO:"):
            self._parse_do(line[len("DO:"):])
        elif upper == "EXIT":
            self._add_line(LineData(exit=True))
        elif line.startswith("#"):
            self._start_node(line[1:].strip())
        elif ":" in line:
            speaker, _, body = line.partition(":")
            self._add_line(LineData(speaker=speaker.strip(), text=body.strip()))
        elif line.startswith("-") and ARROW in line:
            self._parse_response(line)

    # Node and line bookkeeping

    def _start_node(self, name: str) -> None:
        self._flush_node()
        self._started_nodes = True
        self._lines = []
        self._responses = []
        self._nodes.append(NodeData(name=name))

    def _flush_node(self) -> None:
        # Lines before the first node have nowhere to go and are dropped
        if self._nodes and self._lines:
            self._nodes[-1].lines = list(self._lines)

    def _add_line(self, *lines: LineData) -> None:
        self._lines.extend(lines)
        self._responses = []

    def _add_conditional(self, condition: LineData, target: str) -> None:
        """Emit the condition / jump / end-if triple."""
        self._add_line(
            condition,
            LineData(link=format_link(target)),
            LineData(end_if=True),
        )

    # Directives

    def _parse_count(self, body: str) -> None:
        parts = body.split(ARROW)
        if len(parts) != 2:
            logger.debug(f"Skipping malformed COUNT directive: '{body}'")
            return
        self._add_conditional(
            LineData(if_dialog_count=parts[0].replace(" ", "")),
            parts[1],
        )

    def _parse_set(self, body: str) -> None:
        parts = body.split("=")
        if len(parts) != 2:
            logger.debug(f"Skipping malformed SET directive: '{body}'")
            return
        self._add_line(
            LineData(set_var=VarData(key=parts[0].strip(), value=parts[1].strip()))
        )

    def _parse_if(self, body: str) -> None:
        setting = body.split(ARROW)
        if len(setting) != 2:
            logger.debug(f"Skipping malformed IF directive: '{body}'")
            return

        checking = setting[0].split("=")
        if len(checking) != 2:
            logger.debug(f"Skipping malformed IF condition: '{setting[0]}'")
            return

        key, value = checking[0].strip(), checking[1].strip()
        self._add_conditional(LineData(if_var=f"{key}={value}"), setting[1])

    def _parse_if_function(self, body: str) -> None:
        setting = body.split(ARROW)
        if len(setting) != 2:
            logger.debug(f"Skipping malformed IF FUNCTION directive: '{body}'")
            return

        checking = setting[0].split("=")
        if len(checking) != 2:
            logger.debug(f"Skipping malformed IF FUNCTION condition: '{setting[0]}'")
            return

        func, _, param = checking[0].partition(",")
        desired = checking[1].strip()
        self._add_conditional(
            LineData(if_function=f"{func.strip()}::{param.strip()}={desired}"),
            setting[1],
        )

    def _parse_do(self, body: str) -> None:
        func, _, param = body.partition(",")
        func = func.strip()
        if not func:
            logger.debug(f"Skipping DO directive with no function: '{body}'")
            return
        self._add_line(LineData(call_function=f"{func}::{param.strip()}"))

    def _parse_response(self, line: str) -> None:
        arrow = line.index(ARROW)
        response = ResponseData(
            text=line[1:arrow].strip(),
            link=format_link(line[arrow + len(ARROW):]),
        )

        if not self._lines:
            logger.debug(f"Dropping response with no line to attach to: '{line}'")
            return

        target = self._lines[-1]
        if self.strict_responses and target.is_silent:
            logger.debug(f"Dropping response not following a dialog line: '{line}'")
            return

        self._responses.append(response)
        target.responses = list(self._responses)


@functools.lru_cache(maxsize=64)
def _parse_cached(text: str, strict_responses: bool) -> DialogData:
    return ScriptParser(strict_responses).parse(text)


def parse_script(text: str, start: str = "", strict_responses: bool = False) -> DialogData:
    """
    Parse a script, reusing the graph for text that was parsed before.

    Each call gets its own copy; only ``start`` differs between copies.
    """
    cached = _parse_cached(text, strict_responses)
    return cached.model_copy(
        update={"start": start or cached.start},
        deep=True,
    )


def clear_parse_cache() -> None:
    _parse_cached.cache_clear()


def compile_dialog_file(
    input_path: str | Path,
    output_path: Optional[str | Path] = None,
    strict_responses: bool = False,
) -> Path:
    """
    Compile a dialog script to JSON.

    Args:
        input_path: Path to the text script
        output_path: Path to output .json file (default: same name with .json)
        strict_responses: See ScriptParser

    Returns:
        The path written
    """
    input_path = Path(input_path)
    if output_path is None:
        output_path = input_path.with_suffix('.json')
    else:
        output_path = Path(output_path)

    dialog = ScriptParser(strict_responses).parse_file(input_path)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(dialog.to_json(indent=2))

    logger.info(f"Compiled {input_path} -> {output_path}")
    return output_path
