from fastapi import APIRouter, Depends
from rateboard.core.dependencies import get_caller
from rateboard.core.policies import Caller
from rateboard.database.supabase_client import get_service_supabase
from rateboard.modules.profiles.schemas import (
    ProfileCreate, ProfileUpdate, ProfileResponse, ProfileWithRoleResponse
)
from rateboard.modules.profiles.service import ProfileService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_service_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("", response_model=List[ProfileWithRoleResponse])
async def list_profiles(
    search: Optional[str] = None,
    caller: Caller = Depends(get_caller),
    service: ProfileService = Depends(get_profile_service)
):
    """List profiles. Regular users only ever see their own row."""
    return service.list_profiles(caller, search=search)


@router.post("", response_model=ProfileResponse, status_code=201)
async def create_profile(
    profile_data: ProfileCreate,
    caller: Caller = Depends(get_caller),
    service: ProfileService = Depends(get_profile_service)
):
    return service.create_profile(caller, profile_data)


@router.get("/me", response_model=ProfileWithRoleResponse)
async def get_my_profile(
    caller: Caller = Depends(get_caller),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(caller, caller.user_id)


@router.get("/{profile_id}", response_model=ProfileWithRoleResponse)
async def get_profile(
    profile_id: str,
    caller: Caller = Depends(get_caller),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(caller, profile_id)


@router.put("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: str,
    profile_data: ProfileUpdate,
    caller: Caller = Depends(get_caller),
    service: ProfileService = Depends(get_profile_service)
):
    """Update a profile (own profile, or any profile as system_admin)"""
    return service.update_profile(caller, profile_id, profile_data)
