"""Server-Sent Events (SSE) endpoint for enrollment and promotion activity."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from academia.api.dependencies import EventManagerDep

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from academia.api.events import EventManager, Subscriber

router = APIRouter(prefix="/events", tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def school_activity(
    event_manager: EventManager, subscriber: Subscriber
) -> AsyncIterator[str]:
    """Yield the subscriber's events as SSE frames.

    A heartbeat frame is sent whenever nothing arrives within the manager's
    heartbeat interval. The subscriber is removed once the stream ends.
    """
    try:
        while True:
            try:
                event = await asyncio.wait_for(
                    subscriber.queue.get(), timeout=event_manager.heartbeat_interval
                )
            except TimeoutError:
                event = event_manager.create_heartbeat_event()
            yield event.to_sse()
    finally:
        event_manager.unsubscribe(subscriber.id)


@router.get("/stream")
async def event_stream(
    event_manager: EventManagerDep,
    course_id: str | None = Query(default=None, description="Only events for this course"),
) -> StreamingResponse:
    """Stream enrollment and promotion events.

    Promotion events carry the target course, so a course filter also
    receives promotions into that course.
    """
    subscriber = event_manager.subscribe(course_id)
    return StreamingResponse(
        school_activity(event_manager, subscriber),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
