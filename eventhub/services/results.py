"""Typed read models returned by the stores and the aggregation service."""

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field

from eventhub.models import Event


@dataclass(frozen=True)
class StatusCounts:
    total: int = 0
    going: int = 0
    maybe: int = 0
    decline: int = 0


@dataclass(frozen=True)
class EventWithCounts:
    id: uuid.UUID
    title: str
    description: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str
    created_by: uuid.UUID | None
    created_by_name: str | None
    created_at: dt.datetime
    updated_at: dt.datetime
    total_rsvps: int | None = None
    going_count: int | None = None
    maybe_count: int | None = None
    decline_count: int | None = None

    @classmethod
    def from_event(
        cls,
        event: Event,
        created_by_name: str | None,
        counts: StatusCounts | None = None,
    ) -> EventWithCounts:
        extra = {}
        if counts is not None:
            extra = {
                "total_rsvps": counts.total,
                "going_count": counts.going,
                "maybe_count": counts.maybe,
                "decline_count": counts.decline,
            }
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            date=event.date,
            start_time=event.start_time,
            end_time=event.end_time,
            location=event.location,
            created_by=event.created_by,
            created_by_name=created_by_name,
            created_at=event.created_at,
            updated_at=event.updated_at,
            **extra,
        )


@dataclass(frozen=True)
class RsvpDetail:
    id: uuid.UUID
    user_id: uuid.UUID
    event_id: uuid.UUID
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime
    event_title: str
    event_date: dt.date
    event_start_time: dt.time
    event_location: str


@dataclass(frozen=True)
class UserRsvp:
    id: uuid.UUID
    user_id: uuid.UUID
    event_id: uuid.UUID
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime
    title: str
    description: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str
    organizer_name: str | None
    event_status: str


@dataclass(frozen=True)
class EventRsvp:
    id: uuid.UUID
    user_id: uuid.UUID
    event_id: uuid.UUID
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime
    user_name: str
    user_email: str


@dataclass(frozen=True)
class StatusCount:
    status: str
    count: int


@dataclass(frozen=True)
class Attendee:
    user_id: uuid.UUID
    name: str
    email: str
    rsvp_date: dt.datetime


@dataclass(frozen=True)
class RsvpSummary:
    summary: list[StatusCount]
    users: dict[str, list[Attendee]] = field(default_factory=dict)

