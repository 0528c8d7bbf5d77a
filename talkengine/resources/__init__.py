"""Script resource loading."""

from talkengine.resources.database import ScriptDatabase

__all__ = [
    "ScriptDatabase",
]
