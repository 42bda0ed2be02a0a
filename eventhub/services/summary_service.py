from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from eventhub.models import RSVP, User
from eventhub.models.rsvp import RSVP_STATUS_ORDER
from eventhub.services.error_codes import ErrorCode
from eventhub.services.events_service import event_exists
from eventhub.services.exceptions import NotFoundError
from eventhub.services.results import Attendee, RsvpSummary, StatusCount

KNOWN_STATUSES = tuple(s.value for s in RSVP_STATUS_ORDER)


def summarize(db: Session, event_id: uuid.UUID) -> list[StatusCount]:
    """RSVP counts for an event in going/maybe/decline order.

    Statuses nobody picked are left out. Stored values outside the known set
    are ignored.
    """
    rows = db.execute(
        select(RSVP.status, func.count())
        .where(RSVP.event_id == event_id, RSVP.status.in_(KNOWN_STATUSES))
        .group_by(RSVP.status)
    ).all()
    counts = {status: int(count) for status, count in rows}
    return [StatusCount(status=s, count=counts[s]) for s in KNOWN_STATUSES if s in counts]


def list_attendees(db: Session, event_id: uuid.UUID) -> dict[str, list[Attendee]]:
    rows = db.execute(
        select(RSVP.status, User.id, User.name, User.email, RSVP.created_at)
        .join(User, User.id == RSVP.user_id)
        .where(RSVP.event_id == event_id, RSVP.status.in_(KNOWN_STATUSES))
    ).all()

    users: dict[str, list[Attendee]] = {status: [] for status in KNOWN_STATUSES}
    for status, user_id, name, email, created_at in rows:
        users[status].append(
            Attendee(user_id=user_id, name=name, email=email, rsvp_date=created_at)
        )

    for attendees in users.values():
        attendees.sort(key=lambda a: (a.name.casefold(), a.name))
    return users


def rsvp_summary(db: Session, event_id: uuid.UUID) -> RsvpSummary:
    if not event_exists(db, event_id):
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found")
    return RsvpSummary(summary=summarize(db, event_id), users=list_attendees(db, event_id))
