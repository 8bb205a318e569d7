import logging
import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.models.auth_context import AuthClaims
from app.models.role import UserRole
from app.models.user import User

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_MIN_LENGTH = 8
PASSWORD_MIN_SCORE = 3
SESSION_TTL = timedelta(hours=24)

# bcrypt only uses the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt with a fresh random salt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Malformed hashes never verify."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Password hash could not be parsed")
        return False


def issue_token(claims: AuthClaims, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed access token for the given claims.

    Args:
        claims: Caller identity to embed
        expires_delta: Optional custom lifetime. Defaults to JWT_EXPIRE_HOURS.

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(hours=settings.JWT_EXPIRE_HOURS))

    payload = claims.to_payload()
    payload.update(
        {
            "iat": now,
            "exp": expire,
            "iss": settings.JWT_ISSUER,
            "aud": settings.JWT_AUDIENCE,
        }
    )
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and validate a JWT token.

    Checks signature, issuer, audience and expiry.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as e:
        logger.info("Token rejected: %s", e)
        raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN") from e

    if payload.get("exp") is None:
        logger.info("Token rejected: missing expiration")
        raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN")
    if payload.get("sub") is None:
        logger.info("Token rejected: missing subject")
        raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN")

    return payload


def verify_token(token: str) -> AuthClaims:
    """
    Validate a token and return its claims.

    Malformed, expired and tampered tokens fail identically; the reason is
    only logged.
    """
    payload = decode_jwt(token)
    try:
        return AuthClaims.from_payload(payload)
    except (KeyError, ValueError) as e:
        logger.info("Token rejected: bad claims (%s)", e)
        raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN") from e


def authorize(claims: AuthClaims, required_role: UserRole) -> bool:
    """Super admins pass every role check; other roles must match exactly."""
    return claims.is_super_admin() or claims.role == required_role


def authorize_tenant(claims: AuthClaims, tenant_id: str) -> None:
    """
    Ensure the caller may act on tenant_id.

    Raises:
        ForbiddenException: If a non-super-admin targets a tenant other than their own
    """
    if claims.is_super_admin():
        return
    if claims.tenant_id != tenant_id:
        raise ForbiddenException("Access denied to this tenant", code="TENANT_FORBIDDEN")


@dataclass
class PasswordStrength:
    """Outcome of a password strength check, itemised for client display."""

    is_valid: bool
    strength: str
    score: int
    requirements: dict[str, bool] = field(default_factory=dict)


def validate_password_strength(password: str) -> PasswordStrength:
    """
    Score a password on length, upper case, lower case, digits and symbols.

    Valid when at least three of the five criteria hold.
    """
    requirements = {
        "minLength": len(password) >= PASSWORD_MIN_LENGTH,
        "hasUpperCase": re.search(r"[A-Z]", password) is not None,
        "hasLowerCase": re.search(r"[a-z]", password) is not None,
        "hasNumbers": re.search(r"\d", password) is not None,
        "hasSpecialChar": re.search(r"[^A-Za-z0-9_]", password) is not None,
    }
    score = sum(requirements.values())

    if score >= 4:
        strength = "strong"
    elif score >= PASSWORD_MIN_SCORE:
        strength = "medium"
    else:
        strength = "weak"

    return PasswordStrength(
        is_valid=score >= PASSWORD_MIN_SCORE,
        strength=strength,
        score=score,
        requirements=requirements,
    )


def validate_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def create_session(user: User, tenant_id: str | None = None) -> dict:
    """Session data handed to the browser client after login or signup."""
    now = datetime.now(timezone.utc)
    return {
        "sessionId": secrets.token_hex(32),
        "userId": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "role": user.role.value,
        "tenantId": tenant_id or user.tenant_id,
        "gymName": user.gym_name,
        "createdAt": now.isoformat(),
        "expiresAt": (now + SESSION_TTL).isoformat(),
        "lastActivity": now.isoformat(),
    }
