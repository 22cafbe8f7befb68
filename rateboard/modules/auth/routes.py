from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from rateboard.database.supabase_client import get_service_supabase
from rateboard.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    PasswordUpdateRequest, CurrentUserResponse
)
from rateboard.modules.auth.service import AuthService
from rateboard.modules.profiles.service import ProfileService
from rateboard.core.dependencies import get_auth_service, get_caller, get_current_user_id
from rateboard.core.policies import Caller
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Register a new user. The profile and default normal_user role are created alongside the identity."""
    user = service.register(register_data)
    ProfileService(supabase).ensure_new_user_rows(user["id"], user["email"], user["user_metadata"])
    return service.registered(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    caller: Caller = Depends(get_caller)
):
    """Get current authenticated user and the role the dashboards are chosen by"""
    return CurrentUserResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        user_metadata=current_user.get("user_metadata") or {},
        role=caller.role
    )


@router.put("/password", status_code=200)
async def update_password(
    request: PasswordUpdateRequest,
    caller: Caller = Depends(get_caller),
    service: AuthService = Depends(get_auth_service)
):
    """Change the current user's password"""
    service.update_password(caller.user_id, request.password)
    return {"message": "Password updated successfully"}
