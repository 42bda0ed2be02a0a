from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from eventhub.api.v1.common import DBSession, Pagination, parse_id
from eventhub.api.v1.schemas import ApiResponse, RSVPData, RSVPStatsData, RSVPUpsertIn, UserRSVPListData
from eventhub.api.v1.schemas.events import StatusCountOut
from eventhub.api.v1.schemas.rsvps import RSVPOut, UserRSVPOut
from eventhub.auth.deps import require_capability
from eventhub.auth.policy import Capability
from eventhub.auth.tokens import Principal
from eventhub.services import rsvp_service
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import NotFoundError

router = APIRouter(prefix="/rsvps", tags=["rsvps"])

RsvpUser = Annotated[Principal, Depends(require_capability(Capability.RSVP))]


@router.get("/my-rsvps", response_model=ApiResponse[UserRSVPListData])
def list_my_rsvps(db: DBSession, paging: Pagination, principal: RsvpUser):
    rsvps, total = rsvp_service.list_for_user(db, principal.user_id, paging.page, paging.limit)
    return ApiResponse[UserRSVPListData](
        data=UserRSVPListData(
            rsvps=[UserRSVPOut.model_validate(r) for r in rsvps],
            pagination=paging.out(total),
        )
    )


@router.get("/stats", response_model=ApiResponse[RSVPStatsData])
def my_rsvp_stats(db: DBSession, principal: RsvpUser):
    stats = rsvp_service.stats_for_user(db, principal.user_id)
    return ApiResponse[RSVPStatsData](
        data=RSVPStatsData(stats=[StatusCountOut.model_validate(s) for s in stats])
    )


@router.get("/event/{event_id}", response_model=ApiResponse[RSVPData])
def get_my_rsvp(event_id: str, db: DBSession, principal: RsvpUser):
    rsvp = rsvp_service.find_for_user_and_event(db, principal.user_id, parse_id(event_id, "event"))
    if rsvp is None:
        raise NotFoundError(ErrorCode.RSVP_NOT_FOUND.value, "RSVP not found")
    return ApiResponse[RSVPData](data=RSVPData(rsvp=RSVPOut.model_validate(rsvp)))


@router.post("", response_model=ApiResponse[RSVPData])
def upsert_my_rsvp(payload: RSVPUpsertIn, db: DBSession, principal: RsvpUser):
    rsvp, created = rsvp_service.upsert_rsvp(
        db, principal.user_id, payload.event_id, payload.status
    )
    message = "RSVP created successfully" if created else "RSVP updated successfully"
    return ApiResponse[RSVPData](message=message, data=RSVPData(rsvp=RSVPOut.model_validate(rsvp)))


@router.delete("/event/{event_id}", response_model=ApiResponse[None])
def delete_my_rsvp(event_id: str, db: DBSession, principal: RsvpUser):
    rsvp_service.delete_rsvp(db, principal.user_id, parse_id(event_id, "event"))
    return ApiResponse[None](message="RSVP deleted successfully")
