"""
Project roles.

Roles form a strict ranking: every capability of a lower role is also held
by every higher one.

- VIEWER: read the board and the member list
- MEMBER: create, edit, move and delete tasks
- ADMIN:  edit or delete the project, manage memberships, send invitations
"""

from enum import Enum


class Role(str, Enum):
    VIEWER = "VIEWER"
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


ROLE_RANK: dict[Role, int] = {
    Role.VIEWER: 1,
    Role.MEMBER: 2,
    Role.ADMIN: 3,
}

# Roles an invitation may grant; ADMIN is only ever assigned explicitly
INVITABLE_ROLES = frozenset({Role.MEMBER, Role.VIEWER})


def at_least(actual: Role, required: Role) -> bool:
    """Return True if ``actual`` ranks at or above ``required``."""
    return ROLE_RANK[actual] >= ROLE_RANK[required]
