from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import field_serializer

from eventhub.api.v1.schemas.common import PaginationOut, SchemaBase
from eventhub.api.v1.schemas.events import StatusCountOut, TimeOfDayOut
from eventhub.models.rsvp import RSVPStatus


class RSVPUpsertIn(SchemaBase):
    event_id: UUID
    status: RSVPStatus


class RSVPOut(SchemaBase):
    id: UUID
    user_id: UUID
    event_id: UUID
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime
    event_title: str
    event_date: dt.date
    event_start_time: dt.time
    event_location: str

    @field_serializer("event_start_time")
    def _hhmm(self, value: dt.time) -> str:
        return value.strftime("%H:%M")


class RSVPData(SchemaBase):
    rsvp: RSVPOut


class UserRSVPOut(TimeOfDayOut):
    id: UUID
    user_id: UUID
    event_id: UUID
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime
    title: str
    description: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str
    organizer_name: str | None = None
    event_status: str


class UserRSVPListData(SchemaBase):
    rsvps: list[UserRSVPOut]
    pagination: PaginationOut


class EventRSVPOut(SchemaBase):
    id: UUID
    user_id: UUID
    event_id: UUID
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime
    user_name: str
    user_email: str


class EventRSVPListData(SchemaBase):
    rsvps: list[EventRSVPOut]
    pagination: PaginationOut


class RSVPStatsData(SchemaBase):
    stats: list[StatusCountOut]
