from fastapi import APIRouter, Depends, Request, status

from app.dependencies import get_current_claims, get_store
from app.models.auth_context import AuthClaims
from app.schemas.auth_schemas import ForgotPasswordRequest, LoginRequest, SignupRequest
from app.schemas.common import success_response
from app.services.auth_service import AuthService
from app.store.base import TenantScopedStore

router = APIRouter()


@router.post("/login")
async def login(
    data: LoginRequest, request: Request, store: TenantScopedStore = Depends(get_store)
):
    """Exchange email and password for an access token and session"""
    result = await AuthService(store).login(data, request)
    return success_response(result, message="Login successful")


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest, request: Request, store: TenantScopedStore = Depends(get_store)
):
    """Register a gym together with its owner account"""
    result = await AuthService(store).signup(data, request)
    return success_response(result, message="Account created successfully")


@router.post("/forgot-password")
async def forgot_password(data: ForgotPasswordRequest, request: Request):
    result = AuthService.forgot_password(data, request)
    return success_response(result, message="Password reset instructions sent to your email")


@router.post("/verify")
async def verify(claims: AuthClaims = Depends(get_current_claims)):
    """Echo the claims of a valid token"""
    return success_response(message="Token is valid", user=claims.to_payload())
