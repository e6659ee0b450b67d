# Overview: Closed role type and the containment checks used by route guards.

"""
Roles

Three tiers: SuperUser, Admin, User. Guards name the roles they admit
(an allow-list), never a minimum tier.
Stored in users.role as the enum value ("SuperUser", "Admin", "User").
"""
from __future__ import annotations

import enum
from typing import Iterable


class Role(str, enum.Enum):
    SUPERUSER = "SuperUser"
    ADMIN = "Admin"
    USER = "User"


STAFF_ROLES = (Role.SUPERUSER, Role.ADMIN)


def is_allowed(role: Role, allowed: Iterable[Role]) -> bool:
    """Containment check: is `role` one of the `allowed` roles?"""
    return role in tuple(allowed)
