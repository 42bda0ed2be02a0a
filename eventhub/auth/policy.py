"""Role based access policy.

Each route declares the capability it needs; roles are mapped to capability
sets here and nowhere else.
"""

from __future__ import annotations

from enum import Enum

from eventhub.models.user import UserRole


class Capability(str, Enum):
    RSVP = "rsvps:own"
    EDIT_PROFILE = "profile:own"
    MANAGE_EVENTS = "events:manage"
    VIEW_RSVP_SUMMARY = "events:rsvp_summary"
    MANAGE_USERS = "users:manage"


_USER_CAPABILITIES = frozenset({Capability.RSVP, Capability.EDIT_PROFILE})

ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.USER: _USER_CAPABILITIES,
    UserRole.ADMIN: frozenset(Capability),
}


def has_capability(role: UserRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())
