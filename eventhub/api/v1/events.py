from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from eventhub.api.v1.common import DBSession, Pagination, parse_id
from eventhub.api.v1.schemas import (
    ApiResponse,
    EventCreate,
    EventData,
    EventListData,
    EventOut,
    EventUpdate,
    RsvpSummaryData,
)
from eventhub.api.v1.schemas.rsvps import EventRSVPListData, EventRSVPOut
from eventhub.auth.deps import require_capability
from eventhub.auth.policy import Capability
from eventhub.auth.tokens import Principal
from eventhub.services import events_service, rsvp_service, summary_service

router = APIRouter(prefix="/events", tags=["events"])

EventManager = Annotated[Principal, Depends(require_capability(Capability.MANAGE_EVENTS))]
SummaryViewer = Annotated[Principal, Depends(require_capability(Capability.VIEW_RSVP_SUMMARY))]


@router.get("", response_model=ApiResponse[EventListData])
def list_events(
    db: DBSession,
    paging: Pagination,
    upcoming: bool = Query(default=True),
):
    events, total = events_service.list_events(
        db, paging.page, paging.limit, upcoming_only=upcoming
    )
    return ApiResponse[EventListData](
        data=EventListData(
            events=[EventOut.model_validate(e) for e in events],
            pagination=paging.out(total),
        )
    )


@router.get("/mine", response_model=ApiResponse[EventListData])
def list_my_events(db: DBSession, paging: Pagination, principal: EventManager):
    events, total = events_service.list_events_by_creator(
        db, principal.user_id, paging.page, paging.limit
    )
    return ApiResponse[EventListData](
        data=EventListData(
            events=[EventOut.model_validate(e) for e in events],
            pagination=paging.out(total),
        )
    )


@router.get("/{event_id}", response_model=ApiResponse[EventData])
def get_event(event_id: str, db: DBSession):
    event = events_service.get_event(db, parse_id(event_id, "event"), with_counts=True)
    return ApiResponse[EventData](data=EventData(event=EventOut.model_validate(event)))


@router.post("", response_model=ApiResponse[EventData], status_code=201)
def create_event(payload: EventCreate, db: DBSession, principal: EventManager):
    event = events_service.create_event(db, principal.user_id, payload)
    return ApiResponse[EventData](
        message="Event created successfully",
        data=EventData(event=EventOut.model_validate(event)),
    )


@router.put("/{event_id}", response_model=ApiResponse[EventData])
def update_event(event_id: str, payload: EventUpdate, db: DBSession, principal: EventManager):
    event = events_service.update_event(db, parse_id(event_id, "event"), payload)
    return ApiResponse[EventData](
        message="Event updated successfully",
        data=EventData(event=EventOut.model_validate(event)),
    )


@router.delete("/{event_id}", response_model=ApiResponse[None])
def delete_event(event_id: str, db: DBSession, principal: EventManager):
    events_service.delete_event(db, parse_id(event_id, "event"))
    return ApiResponse[None](message="Event deleted successfully")


@router.get("/{event_id}/rsvp-summary", response_model=ApiResponse[RsvpSummaryData])
def get_rsvp_summary(event_id: str, db: DBSession, principal: SummaryViewer):
    result = summary_service.rsvp_summary(db, parse_id(event_id, "event"))
    return ApiResponse[RsvpSummaryData](data=RsvpSummaryData.model_validate(result))


@router.get("/{event_id}/rsvps", response_model=ApiResponse[EventRSVPListData])
def list_event_rsvps(
    event_id: str,
    db: DBSession,
    paging: Pagination,
    principal: SummaryViewer,
):
    rsvps, total = rsvp_service.list_for_event(
        db, parse_id(event_id, "event"), paging.page, paging.limit
    )
    return ApiResponse[EventRSVPListData](
        data=EventRSVPListData(
            rsvps=[EventRSVPOut.model_validate(r) for r in rsvps],
            pagination=paging.out(total),
        )
    )
