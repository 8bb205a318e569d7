from datetime import date
from enum import Enum as PyEnum

from pydantic import Field

from app.models.record import TenantOwnedRecord


class MemberStatus(str, PyEnum):
    """Membership status enumeration"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    EXPIRED = "expired"


class Member(TenantOwnedRecord):
    """
    Gym member belonging to one tenant.

    plan_id references a Plan of the same tenant; plans cannot be deleted
    while referenced.
    """

    name: str
    email: str
    phone: str
    plan_id: str | None = None
    status: MemberStatus = MemberStatus.ACTIVE
    join_date: date = Field(default_factory=date.today)
    emergency_contact: str | None = None
    notes: str = ""
