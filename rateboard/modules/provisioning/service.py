"""
Privileged user provisioning.

Creates an auth identity with the service role key, then optionally
replaces the default role the registration bootstrap assigned. There is no
compensating rollback: if the role update fails the identity stays, with
the normal_user role, and the failure is reported to the caller.
"""

from fastapi import HTTPException
from supabase import Client
from rateboard.core.policies import AppRole
from rateboard.modules.profiles.service import ProfileService
from rateboard.modules.provisioning.schemas import CreateUserRequest, CreateUserResponse, ProvisionedUser
from rateboard.modules.user_roles.service import UserRoleService
import logging

logger = logging.getLogger(__name__)


class ProvisioningError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProvisioningService:
    def __init__(self, admin_supabase: Client):
        self.supabase = admin_supabase
        self.profiles = ProfileService(admin_supabase)
        self.user_roles = UserRoleService(admin_supabase)

    def create_user(self, request: CreateUserRequest) -> CreateUserResponse:
        user_metadata = {}
        if request.name is not None:
            user_metadata["name"] = request.name
        if request.address is not None:
            user_metadata["address"] = request.address

        try:
            response = self.supabase.auth.admin.create_user({
                "email": request.email,
                "password": request.password,
                "email_confirm": True,
                "user_metadata": user_metadata
            })
        except Exception as e:
            logger.error(f"Supabase error: {e}")
            raise ProvisioningError(str(e) or "Supabase error")

        user = response.user if response else None
        if not user:
            raise ProvisioningError("Supabase error")

        try:
            self.profiles.ensure_new_user_rows(user.id, user.email, user.user_metadata or user_metadata)
            if request.role and request.role != AppRole.NORMAL_USER:
                self.user_roles.assign_role(user.id, request.role)
        except HTTPException as e:
            logger.error(f"Role update error for provisioned user {user.id}: {e.detail}")
            raise ProvisioningError(str(e.detail) or "Role update error")

        logger.info(f"Provisioned user {user.id} with role {(request.role or AppRole.NORMAL_USER).value}")
        return CreateUserResponse(
            success=True,
            user=ProvisionedUser(
                id=user.id,
                email=user.email,
                user_metadata=user.user_metadata or {}
            )
        )
