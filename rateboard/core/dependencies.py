"""
Core dependencies for caller resolution and role checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from postgrest.exceptions import APIError
from rateboard.core.errors import http_error_from_api_error
from rateboard.core.policies import ANONYMOUS, AppRole, Caller, roles_for
from rateboard.database.supabase_client import get_supabase, get_service_supabase
from rateboard.modules.auth.service import AuthService
from supabase import Client
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    admin_supabase: Client = Depends(get_service_supabase),
) -> AuthService:
    return AuthService(supabase, admin_supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[dict]:
    """Like get_current_user_id, but anonymous requests resolve to None"""
    if credentials is None:
        return None
    return auth_service.get_current_user(credentials.credentials)


def load_role_rows(user_id: str, supabase: Client) -> List[Dict[str, Any]]:
    """Read the caller's user_roles rows. Must be given the service client, never a caller-scoped one."""
    try:
        result = supabase.table("user_roles")\
            .select("user_id, role")\
            .eq("user_id", user_id)\
            .execute()
        return result.data or []
    except APIError as e:
        logger.error(f"Error loading roles for user {user_id}: {e.message}")
        raise http_error_from_api_error(e)


def build_caller(user_data: dict, supabase: Client) -> Caller:
    user_id = user_data["id"]
    roles = roles_for(user_id, load_role_rows(user_id, supabase))
    return Caller(user_id=user_id, roles=roles, email=user_data.get("email"))


def get_caller(
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_service_supabase)
) -> Caller:
    return build_caller(user_data, supabase)


def get_optional_caller(
    user_data: Optional[dict] = Depends(get_optional_user),
    supabase: Client = Depends(get_service_supabase)
) -> Caller:
    if user_data is None:
        return ANONYMOUS
    return build_caller(user_data, supabase)


def require_role(required_role: AppRole):
    """Factory function to create role check dependency"""
    def check_role(caller: Caller = Depends(get_caller)) -> Caller:
        if not caller.has_role(required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {required_role.value}"
            )
        return caller
    return check_role
