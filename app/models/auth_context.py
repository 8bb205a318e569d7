"""Authenticated caller context for request authorization."""

from dataclasses import dataclass
from typing import Any

from app.models.role import UserRole


@dataclass
class AuthClaims:
    """
    Claims carried by a GymFlow access token.

    Built from a verified JWT and used throughout the request for role
    checks and tenant isolation.

    Attributes:
        user_id: Subject ('sub') of the token
        email: User email (lower-case)
        role: Platform role
        tenant_id: Tenant owned by the user, None for super admins
        first_name: Given name
        last_name: Family name
    """

    user_id: str
    email: str
    role: UserRole
    tenant_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AuthClaims":
        """Build claims from a decoded token payload."""
        return cls(
            user_id=payload["sub"],
            email=payload.get("email", ""),
            role=UserRole(payload.get("role")),
            tenant_id=payload.get("tenantId"),
            first_name=payload.get("firstName"),
            last_name=payload.get("lastName"),
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize claims into the token payload layout."""
        return {
            "sub": self.user_id,
            "email": self.email,
            "role": self.role.value,
            "tenantId": self.tenant_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }

    def is_super_admin(self) -> bool:
        """Check if caller is a platform super admin."""
        return self.role == UserRole.SUPER_ADMIN

    def __repr__(self) -> str:
        return f"<AuthClaims(user_id={self.user_id}, tenant_id={self.tenant_id}, role={self.role.value})>"
