from supabase import Client
from postgrest.exceptions import APIError
from rateboard.core.errors import http_error_from_api_error, not_found
from rateboard.core.policies import Caller, Operation, get_current_user_role, is_allowed, visible_rows
from rateboard.database.supabase_client import fetch_all
from rateboard.database.triggers import handle_new_user, touch_updated_at
from rateboard.modules.profiles.schemas import (
    ProfileCreate, ProfileUpdate, ProfileResponse, ProfileWithRoleResponse
)
from typing import Any, Dict, List, Mapping, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _matches(profile: ProfileWithRoleResponse, search: str) -> bool:
    needle = search.lower()
    values = [profile.name, profile.email, profile.address, profile.role.value if profile.role else ""]
    return any(needle in (value or "").lower() for value in values)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _fetch(self, profile_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", profile_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _role_rows(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Role rows for one user, or the whole table when user_id is None"""
        def build():
            query = self.supabase.table("user_roles").select("id, user_id, role")
            if user_id is not None:
                query = query.eq("user_id", user_id)
            return query.order("id")
        return fetch_all(build)

    def list_profiles(self, caller: Caller, search: Optional[str] = None) -> List[ProfileWithRoleResponse]:
        """Profiles visible to the caller (own row, or every row for system_admin) with their effective role"""
        try:
            def build():
                query = self.supabase.table("profiles").select("*")
                if not caller.is_admin:
                    query = query.eq("id", caller.user_id)
                return query.order("created_at", desc=True).order("id")
            rows = visible_rows(caller, "profiles", fetch_all(build))
            if not rows:
                return []
            role_rows = self._role_rows(None if caller.is_admin else caller.user_id)
            profiles = [
                ProfileWithRoleResponse(**row, role=get_current_user_role(row["id"], role_rows))
                for row in rows
            ]
            if search:
                profiles = [p for p in profiles if _matches(p, search)]
            return profiles
        except APIError as e:
            raise http_error_from_api_error(e)

    def get_profile(self, caller: Caller, profile_id: str) -> ProfileWithRoleResponse:
        """Get a profile by ID; invisible rows are reported as missing"""
        try:
            row = self._fetch(profile_id)
            if row is None or not is_allowed(caller, "profiles", Operation.SELECT, row):
                raise not_found("Profile")
            role = get_current_user_role(profile_id, self._role_rows(profile_id))
            return ProfileWithRoleResponse(**row, role=role)
        except APIError as e:
            raise http_error_from_api_error(e)

    def update_profile(self, caller: Caller, profile_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update own profile, or any profile as system_admin"""
        try:
            row = self._fetch(profile_id)
            if row is None or not is_allowed(caller, "profiles", Operation.UPDATE, row):
                raise not_found("Profile")

            update_data = profile_data.model_dump(exclude_none=True)
            result = self.supabase.table("profiles")\
                .update(touch_updated_at(update_data))\
                .eq("id", profile_id)\
                .execute()

            if not result.data:
                raise not_found("Profile")

            return ProfileResponse(**result.data[0])
        except APIError as e:
            raise http_error_from_api_error(e)

    def create_profile(self, caller: Caller, profile_data: ProfileCreate) -> ProfileResponse:
        """Insert a profile row directly (system_admin only)"""
        row = profile_data.model_dump()
        if not is_allowed(caller, "profiles", Operation.INSERT, row):
            raise HTTPException(status_code=403, detail="Only system admins can create profiles")
        try:
            result = self.supabase.table("profiles").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create profile")
            return ProfileResponse(**result.data[0])
        except APIError as e:
            raise http_error_from_api_error(e)

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Privileged lookup used by store creation to resolve an owner"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("email", email)\
                .limit(1)\
                .execute()
            return result.data[0] if result.data else None
        except APIError as e:
            raise http_error_from_api_error(e)

    def ensure_new_user_rows(
        self,
        user_id: str,
        email: Optional[str],
        user_metadata: Optional[Mapping[str, Any]] = None,
    ) -> ProfileResponse:
        """
        Registration bootstrap. Creates the profile and the default role row
        when the on_auth_user_created trigger has not already done so, so a
        registered identity always ends up with exactly one profile.
        """
        profile_row, role_row = handle_new_user(user_id, email, user_metadata)
        try:
            self.supabase.table("profiles")\
                .upsert(profile_row, on_conflict="id", ignore_duplicates=True)\
                .execute()

            existing_roles = self.supabase.table("user_roles")\
                .select("id")\
                .eq("user_id", user_id)\
                .execute()
            if not existing_roles.data:
                self.supabase.table("user_roles")\
                    .upsert(role_row, on_conflict="user_id,role", ignore_duplicates=True)\
                    .execute()
                logger.info(f"Assigned default role to user {user_id}")

            row = self._fetch(user_id)
            if row is None:
                raise HTTPException(status_code=500, detail="Profile bootstrap failed")
            return ProfileResponse(**row)
        except APIError as e:
            logger.error(f"Profile bootstrap failed for user {user_id}: {e.message}")
            raise http_error_from_api_error(e)
