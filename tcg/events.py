"""Engine events.

The effect system reports what happened to each effect (activated, queued,
resolved, skipped, failed) by publishing ``EngineEvent``s on an optional
``EventBus``. Turn drivers, log views and AI layers listen there instead of
being called by the engine directly; a listener may also push follow-up
effects, which is how cascading triggers reach the stack.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Deque, Dict, List, Optional

if TYPE_CHECKING:
    from .effects.types import EffectInstance

logger = logging.getLogger(__name__)


class EventType(Enum):
    """What an engine event reports"""

    # one effect instance
    EFFECT_ACTIVATED = auto()
    EFFECT_ADDED_TO_STACK = auto()
    EFFECT_RESOLVED = auto()
    EFFECT_SKIPPED = auto()     # condition false
    EFFECT_FAILED = auto()      # exception contained by the stack

    # whole stack
    STACK_CLEARED = auto()

    # host / diagnostics
    STATE_CHANGED = auto()
    LOG_MESSAGE = auto()


@dataclass
class EngineEvent:
    """One published occurrence; payload keys depend on the event type"""

    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def effect_id(self) -> Optional[str]:
        return self.data.get("effect_id")

    @property
    def card_id(self) -> Optional[str]:
        return self.data.get("card_id")

    @property
    def instance(self) -> Optional[EffectInstance]:
        return self.data.get("instance")

    @property
    def error(self) -> Optional[BaseException]:
        return self.data.get("error")

    @property
    def message(self) -> str:
        return self.data.get("message", "")

    def cancel(self) -> None:
        """Handlers with lower priority will not see this event."""
        self.cancelled = True


EventHandler = Callable[[EngineEvent], None]


@dataclass(frozen=True)
class _Subscription:
    priority: int
    order: int
    handler: EventHandler


class EventBus:
    """
    Publish/subscribe hub for engine events

    Handlers run highest priority first, then in subscription order.
    Handlers subscribed to every type run before the per-type ones.
    """

    def __init__(self, max_history: int = 100):
        # None keys the handlers subscribed to every type
        self._subscriptions: Dict[Optional[EventType], List[_Subscription]] = {}
        self._order = itertools.count()
        self._history: Deque[EngineEvent] = deque(maxlen=max_history)

    # ==================== Subscription ====================

    def _add(self, key: Optional[EventType], handler: EventHandler, priority: int) -> Callable[[], None]:
        subs = self._subscriptions.setdefault(key, [])
        sub = _Subscription(priority, next(self._order), handler)
        subs.append(sub)
        subs.sort(key=lambda s: (-s.priority, s.order))

        def unsubscribe() -> None:
            current = self._subscriptions.get(key, [])
            if sub in current:
                current.remove(sub)
        return unsubscribe

    def subscribe(self, event_type: EventType, handler: EventHandler,
                  priority: int = 0) -> Callable[[], None]:
        """
        Listen to one event type

        Args:
            event_type: type to listen to
            handler: called with the event
            priority: higher runs first

        Returns:
            A callable that removes this subscription
        """
        return self._add(event_type, handler, priority)

    def subscribe_all(self, handler: EventHandler, priority: int = 0) -> Callable[[], None]:
        """Listen to every event type"""
        return self._add(None, handler, priority)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        subs = self._subscriptions.get(event_type)
        if subs:
            self._subscriptions[event_type] = [s for s in subs if s.handler != handler]

    def unsubscribe_all(self, handler: EventHandler) -> None:
        """Remove ``handler`` everywhere, global and per-type."""
        for key, subs in self._subscriptions.items():
            self._subscriptions[key] = [s for s in subs if s.handler != handler]

    def clear(self) -> None:
        """Drop every subscription (history is kept)"""
        self._subscriptions.clear()

    # ==================== Publishing ====================

    def publish(self, event: EngineEvent) -> EngineEvent:
        """
        Deliver an event

        A handler that raises is logged and skipped; the remaining handlers
        still run, so a broken listener cannot interrupt stack resolution.

        Returns:
            The event, possibly cancelled by a handler
        """
        self._history.append(event)
        handlers = list(self._subscriptions.get(None, ())) + list(self._subscriptions.get(event.event_type, ()))
        for sub in handlers:
            if event.cancelled:
                break
            try:
                sub.handler(event)
            except Exception:
                logger.exception("Event handler failed for %s", event.event_type.name)
        return event

    def emit(self, event_type: EventType, **data: Any) -> EngineEvent:
        """Build an event from keyword data and publish it"""
        return self.publish(EngineEvent(event_type=event_type, data=data))

    def get_history(self, count: int = 10, event_type: Optional[EventType] = None) -> List[EngineEvent]:
        """Most recent events, oldest first, optionally of one type"""
        events = [e for e in self._history if event_type is None or e.event_type is event_type]
        return events[-count:] if count > 0 else []


class EventEmitter:
    """Mixin for components that publish on an optional bus"""

    def __init__(self):
        self._event_bus: Optional[EventBus] = None

    @property
    def event_bus(self) -> Optional[EventBus]:
        return self._event_bus

    def set_event_bus(self, event_bus: Optional[EventBus]) -> None:
        self._event_bus = event_bus

    def emit(self, event_type: EventType, **data: Any) -> Optional[EngineEvent]:
        """Publish if a bus is attached; returns None otherwise."""
        if self._event_bus is None:
            return None
        return self._event_bus.emit(event_type, **data)

    def emit_log(self, message: str, **data: Any) -> None:
        self.emit(EventType.LOG_MESSAGE, message=message, **data)
