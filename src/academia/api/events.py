"""Event manager for Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4

from academia.dates import utcnow


class EventType(str, Enum):
    """Types of events that can be emitted."""

    ENROLLMENT_CREATED = "enrollment_created"
    ENROLLMENT_DELETED = "enrollment_deleted"
    PROMOTION_COMPLETED = "promotion_completed"
    HEARTBEAT = "heartbeat"


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]
    course_id: str | None = None

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    course_id: str | None = None  # None means subscribe to all courses
    loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def create(cls, course_id: str | None = None) -> Subscriber:
        """Create a new subscriber bound to the running event loop, if any."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        return cls(id=str(uuid4()), queue=asyncio.Queue(), course_id=course_id, loop=loop)

    def deliver(self, event: Event) -> None:
        """Queue an event from any thread."""
        if self.loop is None or self.loop.is_closed():
            self.queue.put_nowait(event)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self.loop:
            self.queue.put_nowait(event)
        else:
            # Sync routes run in a worker thread
            self.loop.call_soon_threadsafe(self.queue.put_nowait, event)


def _timestamp() -> str:
    return utcnow().isoformat() + "Z"


@dataclass
class EventManager:
    """Manager for SSE events.

    Payloads carry identifiers and prices only, never credentials.
    """

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    heartbeat_interval: float = 30.0  # seconds

    def subscribe(self, course_id: str | None = None) -> Subscriber:
        """Subscribe a client to events.

        Args:
            course_id: Optional course ID to filter events. None means all courses.

        Returns:
            Subscriber instance for receiving events.
        """
        subscriber = Subscriber.create(course_id)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events."""
        self._subscribers.pop(subscriber_id, None)

    def _matches(self, subscriber: Subscriber, event: Event) -> bool:
        return subscriber.course_id is None or subscriber.course_id == event.course_id

    async def emit(self, event: Event) -> None:
        """Emit an event to all matching subscribers."""
        for subscriber in self._subscribers.values():
            if self._matches(subscriber, event):
                await subscriber.queue.put(event)

    def emit_sync(self, event: Event) -> None:
        """Emit an event synchronously (for use in non-async contexts)."""
        for subscriber in list(self._subscribers.values()):
            if self._matches(subscriber, event):
                subscriber.deliver(event)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    # Convenience methods for emitting specific event types

    def emit_enrollment_created(
        self,
        enrollment_id: str,
        student_id: str,
        group_id: str,
        course_id: str,
        agreed_price: str,
    ) -> None:
        """Emit an enrollment_created event."""
        event = Event(
            event_type=EventType.ENROLLMENT_CREATED,
            course_id=course_id,
            data={
                "enrollment_id": enrollment_id,
                "student_id": student_id,
                "group_id": group_id,
                "course_id": course_id,
                "agreed_price": agreed_price,
                "timestamp": _timestamp(),
            },
        )
        self.emit_sync(event)

    def emit_enrollment_deleted(self, enrollment_id: str) -> None:
        """Emit an enrollment_deleted event."""
        event = Event(
            event_type=EventType.ENROLLMENT_DELETED,
            data={"enrollment_id": enrollment_id, "timestamp": _timestamp()},
        )
        self.emit_sync(event)

    def emit_promotion_completed(
        self,
        group_id: str,
        course_id: str,
        promoted: int,
        skipped: int,
    ) -> None:
        """Emit a promotion_completed event."""
        event = Event(
            event_type=EventType.PROMOTION_COMPLETED,
            course_id=course_id,
            data={
                "group_id": group_id,
                "course_id": course_id,
                "promoted": promoted,
                "skipped": skipped,
                "timestamp": _timestamp(),
            },
        )
        self.emit_sync(event)

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            course_id=None,  # Heartbeat goes to all subscribers
            data={"timestamp": _timestamp()},
        )
