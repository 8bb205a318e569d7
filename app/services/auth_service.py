import logging
import re
import time
from functools import lru_cache

from starlette.concurrency import run_in_threadpool

from app.core.exceptions import (
    ConflictException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from app.core.logging_config import log_security_event
from app.core.security import (
    create_session,
    hash_password,
    issue_token,
    validate_email,
    validate_password_strength,
    verify_password,
)
from app.models.auth_context import AuthClaims
from app.models.base import utcnow
from app.models.role import UserRole
from app.models.tenant import Tenant, TenantSettings
from app.models.user import User
from app.schemas.auth_schemas import ForgotPasswordRequest, LoginRequest, SignupRequest
from app.store.base import TenantScopedStore, generate_id

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Invalid email or password"
SLUG_MAX_LENGTH = 20
BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("gymflow-timing-equaliser")


def _base36(number: int) -> str:
    digits = []
    while True:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
        if number == 0:
            return "".join(reversed(digits))


def tenant_slug(gym_name: str, timestamp_ms: int | None = None) -> str:
    """
    Tenant id for a new gym.

    Lower-cased alphanumerics of the gym name, cut to 20 characters, then
    ``_`` and the signup time in milliseconds as base 36.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    prefix = re.sub(r"[^a-z0-9]", "", gym_name.lower())[:SLUG_MAX_LENGTH]
    return f"{prefix}_{_base36(timestamp_ms)}"


class AuthService:
    """Service for login, gym signup and token checks"""

    def __init__(self, store: TenantScopedStore):
        self.store = store

    async def find_user_by_email(self, email: str) -> User | None:
        users = await self.store.query("users", {"email": email.strip().lower()})
        return users[0] if users else None

    async def _find_tenant(self, tenant_id: str | None) -> Tenant | None:
        if not tenant_id:
            return None
        try:
            return await self.store.read("tenants", tenant_id)
        except NotFoundException:
            return None

    async def login(self, data: LoginRequest, request=None) -> dict:
        """
        Authenticate by email and password.

        Unknown email and wrong password fail with the same message; a
        dummy hash check keeps their timing alike.

        Raises:
            ValidationException: If the email is malformed
            UnauthorizedException: AUTH_FAILED or ACCOUNT_INACTIVE
        """
        email = data.email.strip().lower()
        if not validate_email(email):
            log_security_event("login_failed", request, reason="invalid_email", email=email)
            raise ValidationException("Invalid email format")

        user = await self.find_user_by_email(email)
        if user is None:
            await run_in_threadpool(verify_password, data.password, _dummy_hash())
            log_security_event("login_failed", request, reason="user_not_found", email=email)
            raise UnauthorizedException(LOGIN_FAILED_MESSAGE, code="AUTH_FAILED")

        if not await run_in_threadpool(verify_password, data.password, user.password_hash):
            log_security_event("login_failed", request, reason="invalid_password", userId=user.id)
            raise UnauthorizedException(LOGIN_FAILED_MESSAGE, code="AUTH_FAILED")

        if not user.is_active:
            log_security_event("login_failed", request, reason="user_inactive", userId=user.id)
            raise UnauthorizedException("Account is deactivated", code="ACCOUNT_INACTIVE")

        tenant = await self._find_tenant(user.tenant_id)
        gym_name = tenant.name if tenant else user.gym_name

        now = utcnow()
        user = await self.store.update("users", user.id, {"last_login": now, "last_activity": now})

        token = issue_token(
            AuthClaims(
                user_id=user.id,
                email=user.email,
                role=user.role,
                tenant_id=user.tenant_id,
                first_name=user.first_name,
                last_name=user.last_name,
            )
        )
        session = create_session(user, user.tenant_id)
        session.update({"rememberMe": data.remember_me, "gymName": gym_name})

        log_security_event(
            "login_success", request, userId=user.id, role=user.role.value, tenantId=user.tenant_id
        )
        return {
            "token": token,
            "session": session,
            "user": {**user.to_api(), "gymName": gym_name},
            "tenant": tenant.to_api() if tenant else None,
        }

    async def signup(self, data: SignupRequest, request=None) -> dict:
        """
        Register a gym (tenant) and its owner account.

        The tenant is created first; if creating the user then fails the
        tenant is deleted again.

        Raises:
            ValidationException: Bad email, or WEAK_PASSWORD with itemised requirements
            ConflictException: EMAIL_EXISTS or TENANT_EXISTS
        """
        email = data.email.strip().lower()
        if not validate_email(email):
            raise ValidationException("Invalid email format")

        strength = validate_password_strength(data.password)
        if not strength.is_valid:
            raise ValidationException(
                "Password does not meet security requirements",
                code="WEAK_PASSWORD",
                requirements=strength.requirements,
            )

        if await self.find_user_by_email(email) is not None:
            log_security_event("signup_failed", request, reason="email_exists", email=email)
            raise ConflictException("An account with this email already exists", code="EMAIL_EXISTS")

        tenant_id = tenant_slug(data.gym_name)
        if await self._find_tenant(tenant_id) is not None:
            raise ConflictException(
                "Gym name is not available, please choose another", code="TENANT_EXISTS"
            )

        password_hash = await run_in_threadpool(hash_password, data.password)

        tenant = await self.store.create(
            "tenants",
            {
                "id": tenant_id,
                "name": data.gym_name,
                "owner": email,
                "plan": data.plan_type,
                "settings": TenantSettings.for_plan(data.plan_type).model_dump(),
            },
        )

        try:
            user = await self.store.create(
                "users",
                {
                    "id": f"user_{generate_id()}",
                    "email": email,
                    "password_hash": password_hash,
                    "first_name": data.first_name,
                    "last_name": data.last_name,
                    "phone": data.phone,
                    "role": UserRole.GYM_OWNER,
                    "tenant_id": tenant.id,
                    "gym_name": data.gym_name,
                    "last_activity": utcnow(),
                },
            )
        except Exception:
            logger.error("User creation failed, rolling back tenant %s", tenant.id)
            await self.store.delete("tenants", tenant.id)
            raise

        token = issue_token(
            AuthClaims(
                user_id=user.id,
                email=user.email,
                role=user.role,
                tenant_id=tenant.id,
                first_name=user.first_name,
                last_name=user.last_name,
            )
        )
        session = create_session(user, tenant.id)

        log_security_event(
            "signup_success", request, userId=user.id, tenantId=tenant.id, gymName=data.gym_name
        )
        return {
            "token": token,
            "session": session,
            "user": user.to_api(),
            "tenant": tenant.to_api(),
        }

    @staticmethod
    def forgot_password(data: ForgotPasswordRequest, request=None) -> dict:
        """
        Accept a password reset request.

        Reports success for any well-formed address, registered or not.
        """
        email = data.email.strip().lower()
        if not validate_email(email):
            raise ValidationException("Valid email is required")
        log_security_event("password_reset_requested", request, email=email)
        return {"email": email}
