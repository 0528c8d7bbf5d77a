import os
import sys
import pytest

# Ensure project packages can be imported
sys.path.append(os.getcwd())


class Recorder:
    """
    Presenter that records lines and leaves advancing to the test.

    Set ``auto_advance`` to advance immediately with ``auto_link``.
    """

    def __init__(self):
        self.lines = []
        self.advances = []
        self.replacers = []
        self.closed = 0
        self.auto_advance = False
        self.auto_link = ""

    def show_line(self, line, advance, replace_inline_text):
        self.lines.append(line)
        self.advances.append(advance)
        self.replacers.append(replace_inline_text)
        if self.auto_advance:
            advance(self.auto_link)

    def close(self):
        self.closed += 1

    @property
    def texts(self):
        return [line.text for line in self.lines]

    def advance(self, link=""):
        self.advances[-1](link)


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from talkengine.core.events import EventBus
    return EventBus()


@pytest.fixture
def variables():
    """Fresh VariableStore for each test."""
    from dialogkit.variables import VariableStore
    return VariableStore()


@pytest.fixture
def recorder():
    """Presenter that records every shown line."""
    from dialogkit.presentation import DialogPresenter

    class RecordingPresenter(Recorder, DialogPresenter):
        pass

    return RecordingPresenter()


@pytest.fixture
def processor(variables, recorder, event_bus):
    """Processor wired to the recorder, with no exit grace delay."""
    from talkengine.core.config import EngineConfig
    from dialogkit.processor import DialogProcessor

    config = EngineConfig(player_name="Ada", exit_grace_delay=0.0)
    return DialogProcessor(variables, presenter=recorder, event_bus=event_bus, config=config)


@pytest.fixture
def make_agent():
    """Build an agent from a text script."""
    from dialogkit.responders import DialogAgent

    def factory(script, name="npc", start="", **kwargs):
        agent = DialogAgent(name, **kwargs)
        agent.set_text_data(script, start)
        return agent

    return factory
