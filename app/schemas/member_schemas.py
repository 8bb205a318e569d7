from datetime import date

from pydantic import Field, field_validator

from app.models.member import MemberStatus
from app.schemas.common import CamelModel


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class MemberCreate(CamelModel):
    """Schema for enrolling a gym member"""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)
    plan_id: str | None = None
    status: MemberStatus = MemberStatus.ACTIVE
    join_date: date | None = None
    emergency_contact: str | None = Field(None, max_length=255)
    notes: str = ""

    @field_validator("plan_id", mode="before")
    @classmethod
    def blank_plan_is_none(cls, value):
        return _blank_to_none(value)


class MemberUpdate(CamelModel):
    """Schema for updating a member (all fields optional; a blank planId clears the plan)"""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, min_length=1, max_length=50)
    plan_id: str | None = None
    status: MemberStatus | None = None
    join_date: date | None = None
    emergency_contact: str | None = Field(None, max_length=255)
    notes: str | None = None

    @field_validator("plan_id", mode="before")
    @classmethod
    def blank_plan_is_none(cls, value):
        return _blank_to_none(value)
