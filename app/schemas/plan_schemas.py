from pydantic import Field

from app.models.plan import PlanDuration
from app.schemas.common import CamelModel


class PlanCreate(CamelModel):
    """Schema for creating a membership plan"""

    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    duration: PlanDuration
    features: list[str] = Field(default_factory=list)
    description: str = ""
    is_active: bool = True


class PlanUpdate(CamelModel):
    """Schema for updating a plan (all fields optional)"""

    name: str | None = Field(None, min_length=1, max_length=255)
    price: float | None = Field(None, ge=0)
    duration: PlanDuration | None = None
    features: list[str] | None = None
    description: str | None = None
    is_active: bool | None = None
