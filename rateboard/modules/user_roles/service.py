from supabase import Client
from postgrest.exceptions import APIError
from rateboard.core.errors import http_error_from_api_error, not_found
from rateboard.core.policies import AppRole, Caller, Operation, is_allowed, visible_rows
from rateboard.modules.user_roles.schemas import UserRoleCreate, UserRoleResponse
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class UserRoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_roles(self, caller: Caller, user_id: Optional[str] = None) -> List[UserRoleResponse]:
        """Role rows visible to the caller, optionally for a single user"""
        try:
            query = self.supabase.table("user_roles").select("*")
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.order("created_at").execute()
            return [UserRoleResponse(**row) for row in visible_rows(caller, "user_roles", result.data or [])]
        except APIError as e:
            raise http_error_from_api_error(e)

    def create_role(self, caller: Caller, role_data: UserRoleCreate) -> UserRoleResponse:
        """Add a role row (system_admin only). Duplicate (user_id, role) pairs are rejected by the database."""
        row = {"user_id": role_data.user_id, "role": role_data.role.value}
        if not is_allowed(caller, "user_roles", Operation.INSERT, row):
            raise HTTPException(status_code=403, detail="Only system admins can manage roles")
        try:
            result = self.supabase.table("user_roles").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create role")
            return UserRoleResponse(**result.data[0])
        except APIError as e:
            raise http_error_from_api_error(e)

    def assign_role(self, user_id: str, role: AppRole) -> List[UserRoleResponse]:
        """
        Replace every role the user holds with `role`. Privileged: callers
        must have checked authorization already. The new row is written
        before the old ones are removed so the user is never left roleless.
        """
        role = AppRole(role)
        try:
            self.supabase.table("user_roles")\
                .upsert({"user_id": user_id, "role": role.value}, on_conflict="user_id,role", ignore_duplicates=True)\
                .execute()
            self.supabase.table("user_roles")\
                .delete()\
                .eq("user_id", user_id)\
                .neq("role", role.value)\
                .execute()
            result = self.supabase.table("user_roles")\
                .select("*")\
                .eq("user_id", user_id)\
                .execute()
            logger.info(f"Role of user {user_id} set to {role.value}")
            return [UserRoleResponse(**row) for row in result.data or []]
        except APIError as e:
            logger.error(f"Role update error for user {user_id}: {e.message}")
            raise http_error_from_api_error(e)

    def set_role(self, caller: Caller, user_id: str, role: AppRole) -> List[UserRoleResponse]:
        if not is_allowed(caller, "user_roles", Operation.UPDATE, {"user_id": user_id}):
            raise HTTPException(status_code=403, detail="Only system admins can manage roles")
        return self.assign_role(user_id, role)

    def delete_role(self, caller: Caller, role_id: str) -> bool:
        try:
            result = self.supabase.table("user_roles")\
                .select("*")\
                .eq("id", role_id)\
                .limit(1)\
                .execute()
            if not result.data or not is_allowed(caller, "user_roles", Operation.DELETE, result.data[0]):
                raise not_found("Role assignment")
            deleted = self.supabase.table("user_roles")\
                .delete()\
                .eq("id", role_id)\
                .execute()
            return len(deleted.data or []) > 0
        except APIError as e:
            raise http_error_from_api_error(e)
