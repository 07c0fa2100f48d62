import pytest
from enum import Enum, auto
from whisper_engine.core.events import EventBus, Event, Signal

class MockEvent(Enum):
    TEST_EVENT = auto()
    OTHER_EVENT = auto()

def test_event_bus_subscribe_publish(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT, data="test")

    assert len(received) == 1
    assert received[0].type == MockEvent.TEST_EVENT
    assert received[0].data["data"] == "test"

def test_event_bus_unsubscribe(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.unsubscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 0

def test_event_priority(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("low"), priority=1, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("high"), priority=10, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("normal"), priority=5, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["high", "normal", "low"]

def test_equal_priority_keeps_subscription_order(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("first"), weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("second"), weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["first", "second"]

def test_event_consumption(event_bus):
    received = []

    def consumer(event):
        received.append("consumer")
        event.consume()

    def later_handler(event):
        received.append("later")

    event_bus.subscribe(MockEvent.TEST_EVENT, consumer, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, later_handler, priority=5)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert received == ["consumer"]

def test_one_shot_handler(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler, one_shot=True)
    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1

def test_one_shot_removed_when_another_handler_unsubscribes(event_bus):
    calls = []
    def once(event):
        calls.append("once")
    def other(event):
        calls.append("other")
    def detach(event):
        event_bus.unsubscribe(MockEvent.TEST_EVENT, other)

    event_bus.subscribe(MockEvent.TEST_EVENT, once, one_shot=True, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, detach, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, other, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert calls.count("once") == 1
    assert event_bus.handler_count(MockEvent.TEST_EVENT) == 1

def test_weak_handler_removed_when_owner_deleted(event_bus):
    class Listener:
        def __init__(self):
            self.count = 0

        def on_event(self, event):
            self.count += 1

    listener = Listener()
    event_bus.subscribe(MockEvent.TEST_EVENT, listener.on_event)
    assert event_bus.handler_count(MockEvent.TEST_EVENT) == 1

    del listener
    event_bus.publish(MockEvent.TEST_EVENT)

    assert event_bus.handler_count(MockEvent.TEST_EVENT) == 0

def test_events_published_during_dispatch_are_queued(event_bus):
    order = []

    def first(event):
        order.append("test start")
        event_bus.publish(MockEvent.OTHER_EVENT)
        order.append("test end")

    def second(event):
        order.append("other")

    event_bus.subscribe(MockEvent.TEST_EVENT, first)
    event_bus.subscribe(MockEvent.OTHER_EVENT, second)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["test start", "test end", "other"]

def test_handler_exception_does_not_stop_delivery(event_bus, caplog):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    def healthy(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, broken, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, healthy)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1
    assert "Error in event handler" in caplog.text

def test_clear_handlers(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.clear()
    event_bus.publish(MockEvent.TEST_EVENT)

    assert received == []

def test_event_get():
    event = Event(type=MockEvent.TEST_EVENT, data={"key": "value"})
    assert event.get("key") == "value"
    assert event.get("missing", 3) == 3
    assert event["key"] == "value"

def test_signal_subscription_unsubscribe():
    signal = Signal("changed")
    received = []

    subscription = signal.subscribe(lambda key, value: received.append((key, value)))
    signal.emit("courage", 10)
    subscription.unsubscribe()
    subscription.unsubscribe()
    signal.emit("courage", 20)

    assert received == [("courage", 10)]
    assert not subscription.active
    assert len(signal) == 0

def test_signal_subscriber_error_is_logged(caplog):
    signal = Signal("changed")
    received = []

    def broken(key, value):
        raise ValueError("bad")

    signal.subscribe(broken)
    signal.subscribe(lambda key, value: received.append(key))
    signal.emit("flag", True)

    assert received == ["flag"]
    assert "Error in 'changed' subscriber" in caplog.text
