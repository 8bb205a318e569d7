from enum import Enum as PyEnum

from pydantic import Field

from app.models.record import TenantOwnedRecord


class PlanDuration(str, PyEnum):
    """Billing period of a membership plan"""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Plan(TenantOwnedRecord):
    """Membership plan offered by a gym. Name is unique within the tenant."""

    name: str
    price: float = Field(..., ge=0)
    duration: PlanDuration
    features: list[str] = Field(default_factory=list)
    description: str = ""
    is_active: bool = True
