from pydantic import Field

from app.models.record import TenantOwnedRecord


class Trainer(TenantOwnedRecord):
    """
    Personal trainer employed by a gym.

    rating and total_sessions are maintained by session tracking, not by
    direct edits.
    """

    name: str
    email: str
    phone: str
    specialization: str
    experience: str = ""
    hourly_rate: float = Field(default=0.0, ge=0)
    bio: str = ""
    is_active: bool = True
    rating: float = 0.0
    total_sessions: int = 0
