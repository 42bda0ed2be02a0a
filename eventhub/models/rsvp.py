import uuid
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from eventhub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class RSVPStatus(str, Enum):
    GOING = "going"
    MAYBE = "maybe"
    DECLINE = "decline"


# Display order for summaries and attendee lists.
RSVP_STATUS_ORDER: tuple[RSVPStatus, ...] = (
    RSVPStatus.GOING,
    RSVPStatus.MAYBE,
    RSVPStatus.DECLINE,
)


class RSVP(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "rsvps"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_rsvps_user_event"),
        sa.Index("ix_rsvps_event_id", "event_id"),
        sa.Index("ix_rsvps_user_id", "user_id"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )

    # Stored as plain text; readers only trust values in RSVPStatus.
    status: Mapped[str] = mapped_column(String(20), nullable=False)
