from __future__ import annotations

import datetime as dt
import re
from uuid import UUID

from pydantic import Field, field_serializer, field_validator

from eventhub.api.v1.schemas.common import PaginationOut, SchemaBase

HHMM_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_hhmm(value: object, label: str) -> dt.time:
    if isinstance(value, dt.time):
        return value.replace(second=0, microsecond=0)
    if isinstance(value, str):
        match = HHMM_RE.match(value.strip())
        if match:
            return dt.time(int(match.group(1)), int(match.group(2)))
    raise ValueError(f"Please provide a valid {label} time in HH:MM format")


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class EventCreate(SchemaBase):
    title: str = Field(min_length=3, max_length=255)
    description: str = Field(min_length=10, max_length=1000)
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str = Field(min_length=1, max_length=500)

    _strip_text = field_validator("title", "description", "location", mode="before")(_strip)

    @field_validator("start_time", mode="before")
    @classmethod
    def _parse_start(cls, value):
        return parse_hhmm(value, "start")

    @field_validator("end_time", mode="before")
    @classmethod
    def _parse_end(cls, value):
        return parse_hhmm(value, "end")


class EventUpdate(SchemaBase):
    title: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = Field(default=None, min_length=10, max_length=1000)
    date: dt.date | None = None
    start_time: dt.time | None = None
    end_time: dt.time | None = None
    location: str | None = Field(default=None, min_length=1, max_length=500)

    _strip_text = field_validator("title", "description", "location", mode="before")(_strip)

    @field_validator("start_time", mode="before")
    @classmethod
    def _parse_start(cls, value):
        return None if value is None else parse_hhmm(value, "start")

    @field_validator("end_time", mode="before")
    @classmethod
    def _parse_end(cls, value):
        return None if value is None else parse_hhmm(value, "end")


class TimeOfDayOut(SchemaBase):
    @field_serializer("start_time", "end_time", check_fields=False)
    def _hhmm(self, value: dt.time) -> str:
        return value.strftime("%H:%M")


class EventOut(TimeOfDayOut):
    id: UUID
    title: str
    description: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str
    created_by: UUID | None = None
    created_by_name: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime
    total_rsvps: int | None = None
    going_count: int | None = None
    maybe_count: int | None = None
    decline_count: int | None = None


class EventData(SchemaBase):
    event: EventOut


class EventListData(SchemaBase):
    events: list[EventOut]
    pagination: PaginationOut


class StatusCountOut(SchemaBase):
    status: str
    count: int


class AttendeeOut(SchemaBase):
    user_id: UUID
    name: str
    email: str
    rsvp_date: dt.datetime


class RsvpSummaryData(SchemaBase):
    summary: list[StatusCountOut]
    users: dict[str, list[AttendeeOut]]
