"""
In-process event bus behind the real-time stream.

Mutating timesheet operations publish {type, data} events; every connected
Server-Sent Events client has its own queue.
"""
import json
import logging
import queue
import threading
from collections import deque
from dataclasses import asdict, dataclass
from uuid import uuid4

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

logger = logging.getLogger(__name__)


@dataclass
class Event:
    id: str
    type: str
    data: dict
    timestamp: str

    def to_sse(self):
        lines = [
            f"id: {self.id}",
            f"event: {self.type}",
            f"data: {json.dumps({'type': self.type, 'data': self.data}, cls=DjangoJSONEncoder)}",
        ]
        return "\n".join(lines) + "\n\n"

    def to_dict(self):
        return asdict(self)


class EventBus:
    """Fan-out of events to subscriber queues with a bounded history."""

    def __init__(self, history_size=100, queue_size=256):
        self._subscribers = set()
        self._history = deque(maxlen=history_size)
        self._queue_size = queue_size
        self._lock = threading.Lock()

    def subscribe(self):
        subscriber = queue.Queue(maxsize=self._queue_size)
        with self._lock:
            self._subscribers.add(subscriber)
        return subscriber

    def unsubscribe(self, subscriber):
        with self._lock:
            self._subscribers.discard(subscriber)

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def publish(self, event_type, payload):
        """Broadcast an event. Returns the Event, or None if it could not be built."""
        try:
            data = json.loads(json.dumps(payload, cls=DjangoJSONEncoder))
        except (TypeError, ValueError) as e:
            logger.error(f"Dropping {event_type} event with unserializable payload: {e}")
            return None

        event = Event(
            id=str(uuid4()),
            type=event_type,
            data=data,
            timestamp=timezone.now().isoformat(),
        )

        with self._lock:
            self._history.append(event)
            dead = []
            for subscriber in self._subscribers:
                try:
                    subscriber.put_nowait(event)
                except queue.Full:
                    logger.warning("Event queue full, dropping subscriber")
                    dead.append(subscriber)
            for subscriber in dead:
                self._subscribers.discard(subscriber)

        logger.debug(f"Published {event_type} to {len(self._subscribers)} subscriber(s)")
        return event

    def recent(self, limit=None):
        with self._lock:
            events = list(self._history)
        if limit and limit > 0:
            events = events[-limit:]
        return events

    def is_subscribed(self, subscriber):
        with self._lock:
            return subscriber in self._subscribers

    def stream(self, subscriber, heartbeat_seconds):
        """
        Yield SSE frames for one subscriber; a comment line every heartbeat.

        Ends once the subscriber has been dropped and its queue is drained, so
        the client reconnects with a fresh queue.
        """
        try:
            yield ": connected\n\n"
            while True:
                if subscriber.empty() and not self.is_subscribed(subscriber):
                    logger.info("Closing event stream of a dropped subscriber")
                    return
                try:
                    event = subscriber.get(timeout=heartbeat_seconds)
                except queue.Empty:
                    yield f": heartbeat {timezone.now().isoformat()}\n\n"
                    continue
                yield event.to_sse()
        finally:
            self.unsubscribe(subscriber)


_event_bus = None
_event_bus_lock = threading.Lock()


def get_event_bus():
    global _event_bus
    if _event_bus is None:
        with _event_bus_lock:
            if _event_bus is None:
                _event_bus = EventBus(history_size=settings.EVENTS_HISTORY_SIZE)
    return _event_bus


def publish(event_type, payload):
    """Publish on the process-wide bus without ever raising into the caller."""
    try:
        return get_event_bus().publish(event_type, payload)
    except Exception:
        logger.exception(f"Failed to publish {event_type}")
        return None
