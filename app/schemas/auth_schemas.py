from pydantic import Field

from app.models.tenant import TenantPlan
from app.schemas.common import CamelModel


class LoginRequest(CamelModel):
    """Schema for logging in"""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    remember_me: bool = False


class SignupRequest(CamelModel):
    """Schema for registering a gym and its owner account"""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    gym_name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    plan_type: TenantPlan = TenantPlan.BASIC


class ForgotPasswordRequest(CamelModel):
    """Schema for requesting password reset instructions"""

    email: str = Field(..., max_length=255)
