"""
Event management system for decoupled engine communication.

This module provides a central event bus that lets engine components report
what they are doing without depending on whoever listens, following the
publisher-subscriber pattern. Behavior scripts own one EventManager and hand
it to the gates, timed actions and cycles they build.

Events are queued on publish and delivered by ``process_events()``. The
queue is bounded: when it is full the oldest event is dropped and counted,
so a long-running action that publishes every cycle cannot grow memory
without limit between drains.
"""

import threading
from collections import defaultdict, deque
from typing import Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from .events import EngineEvent, EventType

DEFAULT_MAX_QUEUE_SIZE = 1000

EventSubscriber = Callable[["EngineEvent"], None]


class EventManager:
    """Central event bus for engine component communication."""

    def __init__(self, max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE):
        """Initialize the event manager.

        Args:
            max_queue_size: Events kept between ``process_events()`` calls;
                the oldest are dropped beyond this

        Raises:
            ValueError: If ``max_queue_size`` is not positive
        """
        if max_queue_size <= 0:
            raise ValueError(f"max_queue_size must be positive, got {max_queue_size}")

        # Event subscribers by event type
        self._subscribers: dict["EventType", list[EventSubscriber]] = defaultdict(list)

        # Pending events, oldest first
        self._event_queue: deque["EngineEvent"] = deque(maxlen=max_queue_size)

        # Statistics
        self._events_published = 0
        self._events_processed = 0
        self._events_dropped = 0
        self._subscriber_errors = 0

        # stop() may publish from another thread
        self._lock = threading.RLock()

    def subscribe(self, event_type: "EventType", subscriber: EventSubscriber) -> None:
        """Subscribe to events of a specific type.

        Args:
            event_type: The type of events to subscribe to
            subscriber: Callback function to handle events
        """
        with self._lock:
            self._subscribers[event_type].append(subscriber)

    def publish(self, event: "EngineEvent") -> None:
        """Queue an event for the next ``process_events()`` call."""
        with self._lock:
            if len(self._event_queue) == self._event_queue.maxlen:
                self._events_dropped += 1
            self._event_queue.append(event)
            self._events_published += 1

    def process_events(self) -> int:
        """Deliver every queued event in publish order.

        Events published by subscribers during delivery wait for the next
        call.

        Returns:
            Number of events processed
        """
        with self._lock:
            pending = list(self._event_queue)
            self._event_queue.clear()

        for event in pending:
            self._process_event(event)

        return len(pending)

    def _process_event(self, event: "EngineEvent") -> None:
        """Notify every subscriber of a single event."""
        with self._lock:
            self._events_processed += 1
            subscribers = list(self._subscribers.get(event.event_type, []))

        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception:
                # A broken subscriber must not stop delivery to the others
                with self._lock:
                    self._subscriber_errors += 1

    def get_statistics(self) -> dict[str, Any]:
        """Get event processing statistics."""
        with self._lock:
            return {
                'events_published': self._events_published,
                'events_processed': self._events_processed,
                'events_queued': len(self._event_queue),
                'events_dropped': self._events_dropped,
                'subscriber_errors': self._subscriber_errors,
                'subscribers_count': sum(len(subs) for subs in self._subscribers.values()),
            }
