"""
Dialog library - script lookup by id over a ScriptDatabase.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from talkengine.resources.database import ScriptDatabase
from dialogkit.models import DialogData
from dialogkit.parser import parse_script
from dialogkit.responders import DialogAgent

logger = logging.getLogger(__name__)


class DialogLibrary:
    """
    Resolves script ids to DialogData.

    JSON dialogs take precedence over text scripts with the same id.

    Usage:
        database = ScriptDatabase("game/data")
        database.load_all()
        library = DialogLibrary(database)
        guard = library.create_agent("guard")
    """

    def __init__(self, database: ScriptDatabase, strict_responses: bool = False):
        self.database = database
        self.strict_responses = strict_responses

    def ids(self) -> list[str]:
        """All known script ids, sorted."""
        return sorted(set(self.database.dialogs) | set(self.database.scripts))

    def __contains__(self, script_id: str) -> bool:
        return (
            self.database.get_dialog(script_id) is not None
            or self.database.get_script(script_id) is not None
        )

    def get(self, script_id: str, start: str = "") -> Optional[DialogData]:
        """
        Build the dialog for a script id.

        Args:
            script_id: File stem of the script
            start: Start node override

        Returns:
            The dialog, or None if no usable script has that id
        """
        raw = self.database.get_dialog(script_id)
        if raw is not None:
            try:
                dialog = DialogData.from_dict(raw)
            except ValidationError as e:
                logger.warning(f"Dialog '{script_id}' failed to load: {e.error_count()} error(s)")
                return None
            if start:
                dialog.start = start
            return dialog

        text = self.database.get_script(script_id)
        if text is not None:
            return parse_script(text, start, self.strict_responses)

        logger.warning(f"Dialog script not found: {script_id}")
        return None

    def create_agent(
        self,
        script_id: str,
        name: Optional[str] = None,
        start: str = "",
        **kwargs,
    ) -> Optional[DialogAgent]:
        """
        Create an agent whose script comes from this library.

        Args:
            script_id: Script to attach
            name: Agent name (defaults to the script id)
            start: Start node override
            **kwargs: Passed to DialogAgent

        Returns:
            The agent, or None if the script is missing
        """
        dialog = self.get(script_id, start)
        if dialog is None:
            return None

        agent = DialogAgent(name or script_id, **kwargs)
        agent.set_data(dialog)
        return agent
