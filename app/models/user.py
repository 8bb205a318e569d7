from datetime import datetime

from app.models.record import Record
from app.models.role import UserRole


class User(Record):
    """
    Platform login account.

    Email is unique across the whole platform and stored lower-case.
    Gym owners carry the id of their tenant; super admins have none.
    """

    email: str
    password_hash: str
    first_name: str
    last_name: str
    phone: str | None = None
    role: UserRole = UserRole.GYM_OWNER
    gym_name: str | None = None
    is_active: bool = True
    email_verified: bool = False
    last_login: datetime | None = None
    last_activity: datetime | None = None

    def to_api(self) -> dict:
        """JSON representation without the password hash."""
        return self.model_dump(mode="json", by_alias=True, exclude={"password_hash"})
