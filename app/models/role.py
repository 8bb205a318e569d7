"""User role enum for role-based access control."""

from enum import Enum as PyEnum


class UserRole(str, PyEnum):
    """
    Platform roles.

    - GYM_OWNER: Manages members, plans and trainers of their own tenant
    - SUPER_ADMIN: Platform operator; passes every role and tenant check
    """

    GYM_OWNER = "gym_owner"
    SUPER_ADMIN = "super_admin"
