from eventhub.models.base import Base
from eventhub.models.event import Event
from eventhub.models.rsvp import RSVP, RSVPStatus
from eventhub.models.user import User, UserRole

__all__ = ["Base", "User", "UserRole", "Event", "RSVP", "RSVPStatus"]
