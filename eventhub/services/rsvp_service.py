from __future__ import annotations

import datetime as dt
import uuid

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from eventhub.models import RSVP, Event, RSVPStatus, User
from eventhub.models.base import utcnow
from eventhub.models.rsvp import RSVP_STATUS_ORDER
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import (
    NotFoundError,
    StoreError,
    ValidationError,
)
from eventhub.services.results import EventRsvp, RsvpDetail, StatusCount, UserRsvp

logger = structlog.get_logger(__name__)

PAST = "past"
UPCOMING = "upcoming"

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _now_local() -> dt.datetime:
    return dt.datetime.now()


def event_status_label(date: dt.date, end_time: dt.time, now: dt.datetime | None = None) -> str:
    ends_at = dt.datetime.combine(date, end_time)
    return PAST if ends_at < (now or _now_local()) else UPCOMING


def _detail_stmt():
    return select(
        RSVP.id,
        RSVP.user_id,
        RSVP.event_id,
        RSVP.status,
        RSVP.created_at,
        RSVP.updated_at,
        Event.title.label("event_title"),
        Event.date.label("event_date"),
        Event.start_time.label("event_start_time"),
        Event.location.label("event_location"),
    ).join(Event, Event.id == RSVP.event_id)


def find_for_user_and_event(
    db: Session, user_id: uuid.UUID, event_id: uuid.UUID
) -> RsvpDetail | None:
    row = db.execute(
        _detail_stmt().where(RSVP.user_id == user_id, RSVP.event_id == event_id)
    ).mappings().first()
    return RsvpDetail(**row) if row else None


def _upsert_statement(db: Session, user_id: uuid.UUID, event_id: uuid.UUID, status: str):
    dialect = db.get_bind().dialect.name
    try:
        insert = _INSERT_BY_DIALECT[dialect]
    except KeyError:
        raise StoreError(
            ErrorCode.STORE_ERROR.value, f"upsert not supported on {dialect}"
        ) from None

    now = utcnow()
    stmt = insert(RSVP).values(
        id=uuid.uuid4(),
        user_id=user_id,
        event_id=event_id,
        status=status,
        created_at=now,
        updated_at=now,
    )
    return stmt.on_conflict_do_update(
        index_elements=["user_id", "event_id"],
        set_={"status": stmt.excluded.status, "updated_at": stmt.excluded.updated_at},
    )


def upsert_rsvp(
    db: Session,
    user_id: uuid.UUID,
    event_id: uuid.UUID,
    status: RSVPStatus,
) -> tuple[RsvpDetail, bool]:
    """Create or update the caller's RSVP for an event.

    The write is a single INSERT .. ON CONFLICT against the (user_id, event_id)
    unique constraint, so concurrent calls for the same pair settle on the last
    writer's status. ``created`` comes from a read taken before the write and
    only shapes the response message.
    """
    if db.get(User, user_id) is None:
        raise NotFoundError(ErrorCode.USER_NOT_FOUND.value, "User not found")

    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found")

    if event_status_label(event.date, event.end_time) == PAST:
        raise ValidationError(ErrorCode.RSVP_EVENT_PAST.value, "Cannot RSVP to past events")

    created = find_for_user_and_event(db, user_id, event_id) is None

    try:
        db.execute(_upsert_statement(db, user_id, event_id, RSVPStatus(status).value))
        db.commit()
    except IntegrityError as exc:
        # Only a foreign key can fail here: the user or event row is gone.
        db.rollback()
        if db.scalar(select(User.id).where(User.id == user_id)) is None:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND.value, "User not found") from exc
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(ErrorCode.STORE_ERROR.value, "Failed to save RSVP") from exc

    rsvp = find_for_user_and_event(db, user_id, event_id)
    if rsvp is None:
        # The event was deleted between the write and the read-back.
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found")

    logger.info(
        "rsvp_upserted",
        user_id=str(user_id),
        event_id=str(event_id),
        status=rsvp.status,
        created=created,
    )
    return rsvp, created


def delete_rsvp(db: Session, user_id: uuid.UUID, event_id: uuid.UUID) -> None:
    try:
        result = db.execute(
            delete(RSVP).where(RSVP.user_id == user_id, RSVP.event_id == event_id)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(ErrorCode.STORE_ERROR.value, "Failed to delete RSVP") from exc

    if not result.rowcount:
        raise NotFoundError(ErrorCode.RSVP_NOT_FOUND.value, "RSVP not found")

    logger.info("rsvp_deleted", user_id=str(user_id), event_id=str(event_id))


def list_for_user(
    db: Session,
    user_id: uuid.UUID,
    page: int,
    limit: int,
) -> tuple[list[UserRsvp], int]:
    organizer = aliased(User)
    base = (
        select(
            RSVP.id,
            RSVP.user_id,
            RSVP.event_id,
            RSVP.status,
            RSVP.created_at,
            RSVP.updated_at,
            Event.title,
            Event.description,
            Event.date,
            Event.start_time,
            Event.end_time,
            Event.location,
            organizer.name.label("organizer_name"),
        )
        .join(Event, Event.id == RSVP.event_id)
        .outerjoin(organizer, organizer.id == Event.created_by)
        .where(RSVP.user_id == user_id)
    )

    total = int(
        db.scalar(
            select(func.count())
            .select_from(RSVP)
            .join(Event, Event.id == RSVP.event_id)
            .where(RSVP.user_id == user_id)
        )
        or 0
    )
    rows = db.execute(
        base.order_by(Event.date.desc(), Event.start_time.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).mappings().all()

    now = _now_local()
    return [
        UserRsvp(**row, event_status=event_status_label(row["date"], row["end_time"], now))
        for row in rows
    ], total


def list_for_event(
    db: Session,
    event_id: uuid.UUID,
    page: int,
    limit: int,
) -> tuple[list[EventRsvp], int]:
    if db.get(Event, event_id) is None:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found")

    total = int(
        db.scalar(
            select(func.count())
            .select_from(RSVP)
            .join(User, User.id == RSVP.user_id)
            .where(RSVP.event_id == event_id)
        )
        or 0
    )
    rows = db.execute(
        select(
            RSVP.id,
            RSVP.user_id,
            RSVP.event_id,
            RSVP.status,
            RSVP.created_at,
            RSVP.updated_at,
            User.name.label("user_name"),
            User.email.label("user_email"),
        )
        .join(User, User.id == RSVP.user_id)
        .where(RSVP.event_id == event_id)
        .order_by(RSVP.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).mappings().all()
    return [EventRsvp(**row) for row in rows], total


def stats_for_user(db: Session, user_id: uuid.UUID) -> list[StatusCount]:
    """Counts of the user's RSVPs to events dated today or later, by status."""
    rows = db.execute(
        select(RSVP.status, func.count())
        .join(Event, Event.id == RSVP.event_id)
        .where(RSVP.user_id == user_id, Event.date >= dt.date.today())
        .group_by(RSVP.status)
    ).all()
    counts = {status: int(count) for status, count in rows}
    return [
        StatusCount(status=s.value, count=counts[s.value])
        for s in RSVP_STATUS_ORDER
        if s.value in counts
    ]
