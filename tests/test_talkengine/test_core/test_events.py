from enum import Enum, auto
from talkengine.core.events import EventBus, Event, DialogEvent

class MockEvent(Enum):
    TEST_EVENT = auto()
    OTHER_EVENT = auto()

def test_event_bus_subscribe_publish(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event = event_bus.publish(MockEvent.TEST_EVENT, {"node": "gate"})

    assert received == [event]
    assert event == Event(MockEvent.TEST_EVENT, {"node": "gate"})
    assert event_bus.publish(MockEvent.OTHER_EVENT).payload is None

def test_subscribe_as_decorator(event_bus):
    received = []

    @event_bus.subscribe(DialogEvent.LINE_STARTED)
    def on_line(event):
        received.append(event.payload)

    event_bus.publish(DialogEvent.LINE_STARTED, "Halt!")

    assert received == ["Halt!"]
    assert callable(on_line)

def test_event_bus_unsubscribe(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    assert event_bus.unsubscribe(MockEvent.TEST_EVENT, handler)
    assert not event_bus.unsubscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 0

def test_handlers_run_in_subscription_order(event_bus):
    order = []

    event_bus.subscribe(DialogEvent.LINE_STARTED, lambda e: order.append(1))
    event_bus.subscribe(DialogEvent.LINE_STARTED, lambda e: order.append(2))

    event_bus.publish(DialogEvent.LINE_STARTED)

    assert order == [1, 2]

def test_duplicate_subscription_is_ignored(event_bus):
    received = []
    handler = received.append

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1
    assert event_bus.handler_count(MockEvent.TEST_EVENT) == 1

def test_handler_may_unsubscribe_itself(event_bus):
    received = []

    def once(event):
        received.append("once")
        event_bus.unsubscribe(MockEvent.TEST_EVENT, once)

    event_bus.subscribe(MockEvent.TEST_EVENT, once)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: received.append("always"))

    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert received == ["once", "always", "always"]

def test_handler_exception_does_not_stop_dispatch(event_bus, caplog):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    event_bus.subscribe(MockEvent.TEST_EVENT, broken)
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1
    assert "Error in event handler" in caplog.text

def test_clear(event_bus):
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: None)
    event_bus.subscribe(MockEvent.OTHER_EVENT, lambda e: None)

    event_bus.clear(MockEvent.TEST_EVENT)
    assert event_bus.handler_count(MockEvent.TEST_EVENT) == 0
    assert event_bus.handler_count(MockEvent.OTHER_EVENT) == 1

    event_bus.clear()
    assert event_bus.handler_count(MockEvent.OTHER_EVENT) == 0
