"""
Core engine module.

Exports:
- EventBus, Event, DialogEvent: Event system
- DataModel: Data model base
- EngineConfig, configure_logging: Configuration
"""

from talkengine.core.events import EventBus, Event, DialogEvent
from talkengine.core.component import DataModel
from talkengine.core.config import EngineConfig, configure_logging

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
]
