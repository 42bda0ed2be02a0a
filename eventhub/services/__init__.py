from eventhub.services.events_service import (
    create_event,
    delete_event,
    get_event,
    list_events,
    list_events_by_creator,
    update_event,
)
from eventhub.services.rsvp_service import (
    delete_rsvp,
    find_for_user_and_event,
    list_for_event,
    list_for_user,
    stats_for_user,
    upsert_rsvp,
)
from eventhub.services.summary_service import list_attendees, rsvp_summary, summarize
from eventhub.services.users_service import (
    authenticate,
    create_user,
    delete_user,
    find_by_email,
    get_user,
    list_users,
    update_user,
)

__all__ = [
    "create_user",
    "find_by_email",
    "get_user",
    "authenticate",
    "update_user",
    "list_users",
    "delete_user",
    "create_event",
    "update_event",
    "delete_event",
    "list_events",
    "list_events_by_creator",
    "get_event",
    "upsert_rsvp",
    "find_for_user_and_event",
    "delete_rsvp",
    "list_for_user",
    "list_for_event",
    "stats_for_user",
    "summarize",
    "list_attendees",
    "rsvp_summary",
]
