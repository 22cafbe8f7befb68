from fastapi import APIRouter, Depends
from rateboard.core.dependencies import get_caller
from rateboard.core.policies import Caller
from rateboard.database.supabase_client import get_service_supabase
from rateboard.modules.user_roles.schemas import UserRoleAssign, UserRoleCreate, UserRoleResponse
from rateboard.modules.user_roles.service import UserRoleService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/user-roles", tags=["user-roles"])


def get_user_role_service(supabase: Client = Depends(get_service_supabase)) -> UserRoleService:
    return UserRoleService(supabase)


@router.get("", response_model=List[UserRoleResponse])
async def list_user_roles(
    user_id: Optional[str] = None,
    caller: Caller = Depends(get_caller),
    service: UserRoleService = Depends(get_user_role_service)
):
    """List role rows (own rows, or all rows for system_admin)"""
    return service.list_roles(caller, user_id=user_id)


@router.post("", response_model=UserRoleResponse, status_code=201)
async def create_user_role(
    role_data: UserRoleCreate,
    caller: Caller = Depends(get_caller),
    service: UserRoleService = Depends(get_user_role_service)
):
    return service.create_role(caller, role_data)


@router.put("/{user_id}", response_model=List[UserRoleResponse])
async def set_user_role(
    user_id: str,
    role_data: UserRoleAssign,
    caller: Caller = Depends(get_caller),
    service: UserRoleService = Depends(get_user_role_service)
):
    """Replace a user's role (system_admin only)"""
    return service.set_role(caller, user_id, role_data.role)


@router.delete("/{role_id}", status_code=204)
async def delete_user_role(
    role_id: str,
    caller: Caller = Depends(get_caller),
    service: UserRoleService = Depends(get_user_role_service)
):
    service.delete_role(caller, role_id)
    return None
