"""
Talk Engine

Generic runtime layer for the dialog scripting engine: events, data models,
configuration and script resources.

Quick Start:
    from talkengine import EngineConfig, EventBus
    from dialogkit import DialogAgent, DialogProcessor, VariableStore

    config = EngineConfig(player_name="Ada")
    processor = DialogProcessor(VariableStore(), event_bus=EventBus(), config=config)
    agent = DialogAgent("guard")
    agent.set_text_data(open("guard.dlg").read())
    agent.initiate_dialog(processor)
"""

__version__ = "0.1.0"
__author__ = "Developer"

from talkengine.core import (
    EventBus,
    Event,
    DialogEvent,
    DataModel,
    EngineConfig,
    configure_logging,
)
from talkengine.resources import ScriptDatabase

__all__ = [
    # Events
    "EventBus",
    "Event",
    "DialogEvent",
    # Data
    "DataModel",
    # Config
    "EngineConfig",
    "configure_logging",
    # Resources
    "ScriptDatabase",
]
