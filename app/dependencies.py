from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import ForbiddenException, UnauthorizedException, ValidationException
from app.core.logging_config import log_security_event
from app.core.security import authorize, authorize_tenant, verify_token
from app.models.auth_context import AuthClaims
from app.models.role import UserRole
from app.store.base import TenantScopedStore

TENANT_HEADER = "X-Tenant-ID"
TENANT_PARAM = "tenantId"

# auto_error=False so a missing header yields our AUTH_REQUIRED envelope
security = HTTPBearer(auto_error=False)


def get_store(request: Request) -> TenantScopedStore:
    """The store created at application startup."""
    return request.app.state.store


async def get_current_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthClaims:
    """
    FastAPI dependency to validate the bearer token.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate signature, issuer, audience and expiry
    3. Attach the claims to request.state for logging
    4. Return the claims for use in endpoints

    Raises:
        UnauthorizedException: AUTH_REQUIRED without a token, INVALID_TOKEN for a bad one
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Authentication required", code="AUTH_REQUIRED")

    token = credentials.credentials
    try:
        claims = verify_token(token)
    except UnauthorizedException:
        log_security_event("invalid_token", request, token=f"{token[:10]}...")
        raise

    request.state.claims = claims
    return claims


async def _tenant_id_from_request(request: Request) -> str | None:
    tenant_id = (
        request.headers.get(TENANT_HEADER)
        or request.query_params.get(TENANT_PARAM)
        or request.path_params.get(TENANT_PARAM)
    )
    if tenant_id:
        return tenant_id

    if request.method in ("POST", "PUT", "PATCH") and "json" in request.headers.get("content-type", ""):
        try:
            body = await request.json()
        except ValueError:
            # malformed bodies are reported by request validation
            return None
        if isinstance(body, dict) and isinstance(body.get(TENANT_PARAM), str):
            return body[TENANT_PARAM]
    return None


async def get_tenant_id(request: Request, claims: AuthClaims = Depends(get_current_claims)) -> str:
    """
    Resolve the tenant a request acts on.

    Looked up in the X-Tenant-ID header, then the ``tenantId`` query
    parameter, then a ``{tenantId}`` path segment (for routers mounted
    under one), then a ``tenantId`` field of a JSON body. Super admins
    may target any tenant; gym owners only their own.

    Raises:
        ValidationException: TENANT_REQUIRED if no tenant id was supplied
        ForbiddenException: TENANT_FORBIDDEN for another gym's tenant
    """
    tenant_id = await _tenant_id_from_request(request)
    if not tenant_id:
        raise ValidationException("Tenant ID required", code="TENANT_REQUIRED")

    try:
        authorize_tenant(claims, tenant_id)
    except ForbiddenException:
        log_security_event("tenant_access_denied", request, requestedTenant=tenant_id)
        raise

    request.state.tenant_id = tenant_id
    return tenant_id


def require_role(role: UserRole):
    """Dependency factory allowing only callers with role (super admins always pass)."""

    async def check_role(claims: AuthClaims = Depends(get_current_claims)) -> AuthClaims:
        if not authorize(claims, role):
            raise ForbiddenException(
                "Insufficient permissions",
                required=[role.value],
                current=claims.role.value,
            )
        return claims

    return check_role
