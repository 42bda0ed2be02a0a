from eventhub.api.v1.schemas.auth import (
    AuthData,
    LoginIn,
    ProfileUpdateIn,
    RegisterIn,
    UserData,
    UserOut,
)
from eventhub.api.v1.schemas.common import ApiResponse, PaginationOut, SchemaBase
from eventhub.api.v1.schemas.events import (
    EventCreate,
    EventData,
    EventListData,
    EventOut,
    EventUpdate,
    RsvpSummaryData,
)
from eventhub.api.v1.schemas.rsvps import (
    EventRSVPListData,
    RSVPData,
    RSVPStatsData,
    RSVPUpsertIn,
    UserRSVPListData,
)

__all__ = [
    "ApiResponse",
    "PaginationOut",
    "SchemaBase",
    "RegisterIn",
    "LoginIn",
    "ProfileUpdateIn",
    "UserOut",
    "UserData",
    "AuthData",
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "EventData",
    "EventListData",
    "RsvpSummaryData",
    "RSVPUpsertIn",
    "RSVPData",
    "UserRSVPListData",
    "EventRSVPListData",
    "RSVPStatsData",
]
