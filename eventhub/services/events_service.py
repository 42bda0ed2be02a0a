from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Iterable

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventhub.api.v1.schemas.events import EventCreate, EventUpdate
from eventhub.models import RSVP, Event, RSVPStatus, User
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import NotFoundError, StoreError, ValidationError
from eventhub.services.results import EventWithCounts, StatusCounts

logger = structlog.get_logger(__name__)


def _today() -> dt.date:
    return dt.date.today()


def _validate_schedule(date: dt.date, start_time: dt.time, end_time: dt.time) -> None:
    if date < _today():
        raise ValidationError(
            ErrorCode.EVENT_DATE_IN_PAST.value, "Event date cannot be in the past"
        )
    if end_time <= start_time:
        raise ValidationError(
            ErrorCode.EVENT_TIME_RANGE_INVALID.value, "End time must be after start time"
        )


def _get_event_row(db: Session, event_id: uuid.UUID) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found")
    return event


def _creator_name(db: Session, event: Event) -> str | None:
    if event.created_by is None:
        return None
    return db.scalar(select(User.name).where(User.id == event.created_by))


def counts_for_events(db: Session, event_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, StatusCounts]:
    """RSVP counts per event, read at call time."""
    ids = list(event_ids)
    if not ids:
        return {}

    rows = db.execute(
        select(RSVP.event_id, RSVP.status, func.count())
        .where(RSVP.event_id.in_(ids))
        .group_by(RSVP.event_id, RSVP.status)
    ).all()

    tallies: dict[uuid.UUID, dict[str, int]] = {event_id: {} for event_id in ids}
    for event_id, status, count in rows:
        tallies[event_id][status] = int(count)

    return {
        event_id: StatusCounts(
            total=sum(by_status.values()),
            going=by_status.get(RSVPStatus.GOING.value, 0),
            maybe=by_status.get(RSVPStatus.MAYBE.value, 0),
            decline=by_status.get(RSVPStatus.DECLINE.value, 0),
        )
        for event_id, by_status in tallies.items()
    }


def _with_creator_names(
    db: Session,
    events: list[Event],
    counts: dict[uuid.UUID, StatusCounts] | None,
) -> list[EventWithCounts]:
    creator_ids = {e.created_by for e in events if e.created_by is not None}
    names: dict[uuid.UUID, str] = {}
    if creator_ids:
        names = dict(db.execute(select(User.id, User.name).where(User.id.in_(creator_ids))).all())

    return [
        EventWithCounts.from_event(
            event,
            names.get(event.created_by) if event.created_by else None,
            counts.get(event.id) if counts is not None else None,
        )
        for event in events
    ]


def create_event(db: Session, creator_id: uuid.UUID, payload: EventCreate) -> EventWithCounts:
    _validate_schedule(payload.date, payload.start_time, payload.end_time)

    event = Event(
        title=payload.title,
        description=payload.description,
        date=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        location=payload.location,
        created_by=creator_id,
    )
    db.add(event)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(ErrorCode.STORE_ERROR.value, "Failed to create event") from exc

    db.refresh(event)
    logger.info("event_created", event_id=str(event.id), created_by=str(creator_id))
    return EventWithCounts.from_event(event, _creator_name(db, event))


def update_event(db: Session, event_id: uuid.UUID, patch: EventUpdate) -> EventWithCounts:
    event = _get_event_row(db, event_id)

    patch_data = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
    if not patch_data:
        raise ValidationError(ErrorCode.NO_FIELDS_TO_UPDATE.value, "No fields to update")

    _validate_schedule(
        patch_data.get("date", event.date),
        patch_data.get("start_time", event.start_time),
        patch_data.get("end_time", event.end_time),
    )

    for key, value in patch_data.items():
        setattr(event, key, value)

    db.add(event)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(ErrorCode.STORE_ERROR.value, "Failed to update event") from exc

    db.refresh(event)
    logger.info("event_updated", event_id=str(event.id), fields=sorted(patch_data))
    return EventWithCounts.from_event(event, _creator_name(db, event))


def delete_event(db: Session, event_id: uuid.UUID) -> int:
    """Delete an event and every RSVP pointing at it in one transaction.

    Returns the number of RSVPs removed. An RSVP written concurrently for the
    same event can still slip in between the two statements; there is no lock
    on the event row.
    """
    event = _get_event_row(db, event_id)
    try:
        removed = db.execute(delete(RSVP).where(RSVP.event_id == event.id)).rowcount or 0
        db.execute(delete(Event).where(Event.id == event.id))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(ErrorCode.STORE_ERROR.value, "Failed to delete event") from exc

    logger.info("event_deleted", event_id=str(event_id), rsvps_removed=removed)
    return removed


def list_events(
    db: Session,
    page: int,
    limit: int,
    upcoming_only: bool = True,
) -> tuple[list[EventWithCounts], int]:
    stmt = select(Event)
    count_stmt = select(func.count()).select_from(Event)
    if upcoming_only:
        stmt = stmt.where(Event.date >= _today())
        count_stmt = count_stmt.where(Event.date >= _today())

    total = int(db.scalar(count_stmt) or 0)
    events = list(
        db.scalars(
            stmt.order_by(Event.date.asc(), Event.start_time.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
    )

    return _with_creator_names(db, events, counts_for_events(db, [e.id for e in events])), total


def list_events_by_creator(
    db: Session,
    creator_id: uuid.UUID,
    page: int,
    limit: int,
) -> tuple[list[EventWithCounts], int]:
    total = int(
        db.scalar(select(func.count()).select_from(Event).where(Event.created_by == creator_id))
        or 0
    )
    events = list(
        db.scalars(
            select(Event)
            .where(Event.created_by == creator_id)
            .order_by(Event.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
    )
    return _with_creator_names(db, events, counts_for_events(db, [e.id for e in events])), total


def get_event(db: Session, event_id: uuid.UUID, with_counts: bool = False) -> EventWithCounts:
    event = _get_event_row(db, event_id)
    counts = counts_for_events(db, [event.id]).get(event.id) if with_counts else None
    return EventWithCounts.from_event(event, _creator_name(db, event), counts)


def event_exists(db: Session, event_id: uuid.UUID) -> bool:
    return db.scalar(select(Event.id).where(Event.id == event_id)) is not None
