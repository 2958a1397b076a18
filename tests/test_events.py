"""
Event system unit tests
EventBus, EngineEvent and EventEmitter
"""

import pytest

from tcg.events import EngineEvent, EventBus, EventEmitter, EventType


class TestEventBus:
    """Event bus tests"""

    def setup_method(self):
        self.bus = EventBus()
        self.received_events = []

    def test_subscribe_and_publish(self):
        def handler(event):
            self.received_events.append(event)

        self.bus.subscribe(EventType.LOG_MESSAGE, handler)
        self.bus.emit(EventType.LOG_MESSAGE, message="test message")

        assert len(self.received_events) == 1
        assert self.received_events[0].message == "test message"

    def test_only_matching_type(self):
        self.bus.subscribe(EventType.EFFECT_RESOLVED, self.received_events.append)
        self.bus.emit(EventType.EFFECT_FAILED)
        assert self.received_events == []

    def test_priority_order(self):
        order = []
        self.bus.subscribe(EventType.EFFECT_RESOLVED, lambda e: order.append("low"), priority=1)
        self.bus.subscribe(EventType.EFFECT_RESOLVED, lambda e: order.append("high"), priority=10)

        self.bus.emit(EventType.EFFECT_RESOLVED)

        assert order == ["high", "low"]

    def test_cancel_event(self):
        def canceller(event):
            event.cancel()

        self.bus.subscribe(EventType.EFFECT_ACTIVATED, canceller, priority=10)
        self.bus.subscribe(EventType.EFFECT_ACTIVATED, self.received_events.append, priority=1)

        event = self.bus.emit(EventType.EFFECT_ACTIVATED)

        assert event.cancelled
        assert self.received_events == []

    def test_unsubscribe(self):
        handler = self.received_events.append
        self.bus.subscribe(EventType.LOG_MESSAGE, handler)
        self.bus.unsubscribe(EventType.LOG_MESSAGE, handler)
        self.bus.emit(EventType.LOG_MESSAGE, message="x")
        assert self.received_events == []

    def test_global_handler(self):
        self.bus.subscribe_all(self.received_events.append)
        self.bus.emit(EventType.EFFECT_RESOLVED)
        self.bus.emit(EventType.STACK_CLEARED)
        assert [e.event_type for e in self.received_events] == [
            EventType.EFFECT_RESOLVED, EventType.STACK_CLEARED,
        ]

    def test_unsubscribe_all(self):
        handler = self.received_events.append
        self.bus.subscribe_all(handler)
        self.bus.subscribe(EventType.LOG_MESSAGE, handler)
        self.bus.unsubscribe_all(handler)
        self.bus.emit(EventType.LOG_MESSAGE)
        assert self.received_events == []

    def test_failing_handler_does_not_stop_others(self, caplog):
        def broken(event):
            raise RuntimeError("listener bug")

        self.bus.subscribe(EventType.EFFECT_FAILED, broken, priority=5)
        self.bus.subscribe(EventType.EFFECT_FAILED, self.received_events.append, priority=1)

        with caplog.at_level("ERROR"):
            self.bus.emit(EventType.EFFECT_FAILED)

        assert len(self.received_events) == 1
        assert "Event handler failed" in caplog.text

    def test_history_is_bounded(self):
        bus = EventBus(max_history=3)
        for i in range(5):
            bus.emit(EventType.LOG_MESSAGE, message=str(i))
        history = bus.get_history(count=10)
        assert [e.message for e in history] == ["2", "3", "4"]

    def test_clear(self):
        self.bus.subscribe(EventType.LOG_MESSAGE, self.received_events.append)
        self.bus.clear()
        self.bus.emit(EventType.LOG_MESSAGE)
        assert self.received_events == []


class TestEngineEvent:
    def test_properties(self):
        error = ValueError("bad")
        event = EngineEvent(
            EventType.EFFECT_FAILED,
            data={"effect_id": "E1", "card_id": "C1", "error": error, "message": "bad"},
        )
        assert event.effect_id == "E1"
        assert event.card_id == "C1"
        assert event.error is error
        assert event.message == "bad"

    def test_defaults(self):
        event = EngineEvent(EventType.STATE_CHANGED)
        assert event.effect_id is None
        assert event.message == ""
        assert not event.cancelled


class TestEventEmitter:
    def test_without_bus(self):
        emitter = EventEmitter()
        assert emitter.emit(EventType.LOG_MESSAGE) is None

    def test_with_bus(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.LOG_MESSAGE, received.append)

        emitter = EventEmitter()
        emitter.set_event_bus(bus)
        emitter.emit_log("hello", effect_id="E1")

        assert received[0].message == "hello"
        assert received[0].effect_id == "E1"


@pytest.mark.parametrize("event_type", list(EventType))
def test_every_event_type_can_be_emitted(event_type):
    bus = EventBus()
    assert bus.emit(event_type).event_type is event_type


class TestSubscriptionHandles:
    def test_returned_callable_unsubscribes(self):
        bus = EventBus()
        received = []
        remove = bus.subscribe(EventType.EFFECT_RESOLVED, received.append)
        remove()
        remove()
        bus.emit(EventType.EFFECT_RESOLVED)
        assert received == []

    def test_equal_priority_keeps_subscription_order(self):
        bus = EventBus()
        order = []
        for name in ("first", "second", "third"):
            bus.subscribe(EventType.EFFECT_RESOLVED, lambda e, n=name: order.append(n))
        bus.emit(EventType.EFFECT_RESOLVED)
        assert order == ["first", "second", "third"]

    def test_global_handlers_run_first(self):
        bus = EventBus()
        order = []
        bus.subscribe(EventType.EFFECT_RESOLVED, lambda e: order.append("typed"), priority=100)
        bus.subscribe_all(lambda e: order.append("global"))
        bus.emit(EventType.EFFECT_RESOLVED)
        assert order == ["global", "typed"]

    def test_history_by_type(self):
        bus = EventBus()
        bus.emit(EventType.EFFECT_RESOLVED, effect_id="a")
        bus.emit(EventType.EFFECT_FAILED, effect_id="b")
        bus.emit(EventType.EFFECT_RESOLVED, effect_id="c")
        resolved = bus.get_history(event_type=EventType.EFFECT_RESOLVED)
        assert [e.effect_id for e in resolved] == ["a", "c"]
        assert [e.effect_id for e in bus.get_history(count=1)] == ["c"]
        assert bus.get_history(count=0) == []

    def test_instance_property(self):
        marker = object()
        event = EngineEvent(EventType.EFFECT_RESOLVED, data={"instance": marker})
        assert event.instance is marker
