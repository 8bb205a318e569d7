"""Tenant model for multi-tenant isolation."""

from enum import Enum as PyEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.record import Record

BASIC_FEATURES = ["members", "plans"]
PREMIUM_FEATURES = ["members", "plans", "trainers", "analytics", "reports"]


class TenantPlan(str, PyEnum):
    """Subscription tier of a gym on the platform"""

    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class TenantSettings(BaseModel):
    """Per-gym settings stored on the tenant record"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timezone: str = "UTC"
    currency: str = "USD"
    features: list[str] = Field(default_factory=lambda: list(BASIC_FEATURES))

    @classmethod
    def for_plan(cls, plan: TenantPlan) -> "TenantSettings":
        """Default settings with the feature set unlocked by a tier."""
        features = BASIC_FEATURES if plan == TenantPlan.BASIC else PREMIUM_FEATURES
        return cls(features=list(features))


class Tenant(Record):
    """
    Multi-tenant isolation boundary.

    A tenant is one gym. Its id is a slug derived from the gym name at
    signup, and every member, plan and trainer carries that id. A tenant
    is itself not owned by a tenant, so ``tenant_id`` stays None.
    """

    name: str
    owner: str
    plan: TenantPlan = TenantPlan.BASIC
    is_active: bool = True
    settings: TenantSettings = Field(default_factory=TenantSettings)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}')>"
