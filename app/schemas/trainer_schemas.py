from pydantic import Field

from app.schemas.common import CamelModel


class TrainerCreate(CamelModel):
    """Schema for adding a trainer"""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)
    specialization: str = Field(..., min_length=1, max_length=255)
    experience: str = ""
    hourly_rate: float = Field(0.0, ge=0)
    bio: str = ""
    is_active: bool = True


class TrainerUpdate(CamelModel):
    """
    Schema for updating a trainer.

    rating and total_sessions are maintained elsewhere and are not
    accepted here.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, min_length=1, max_length=50)
    specialization: str | None = Field(None, min_length=1, max_length=255)
    experience: str | None = None
    hourly_rate: float | None = Field(None, ge=0)
    bio: str | None = None
    is_active: bool | None = None
