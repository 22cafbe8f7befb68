import json
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from rateboard.core.dependencies import require_role
from rateboard.core.policies import AppRole, Caller
from rateboard.database.supabase_client import SupabaseClient
from rateboard.modules.provisioning.schemas import CreateUserRequest
from rateboard.modules.provisioning.service import ProvisioningError, ProvisioningService
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["provisioning"])


def get_admin_supabase() -> Client:
    """Service role client; identities cannot be created with the public key."""
    if not SupabaseClient.has_service_client():
        raise HTTPException(
            status_code=500,
            detail="Service role key not configured. Cannot create users."
        )
    return SupabaseClient.get_service_client()


def get_provisioning_service(supabase: Client = Depends(get_admin_supabase)) -> ProvisioningService:
    return ProvisioningService(supabase)


def _error(message: str, status_code: int = 400, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err.get("loc", ()))
        parts.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid value"))
    return "; ".join(parts) or "Invalid request body"


@router.post("/create-user")
async def create_user(
    request: Request,
    caller: Caller = Depends(require_role(AppRole.SYSTEM_ADMIN)),
    service: ProvisioningService = Depends(get_provisioning_service)
):
    """Create a user with a password and optional role (system_admin only)"""
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else None
    except ValueError:
        return _error("Invalid JSON format")
    if not isinstance(body, dict):
        return _error("Request body must be a JSON object")
    if not body.get("email") or not body.get("password"):
        return _error("Email and password are required")

    try:
        data = CreateUserRequest.model_validate(body)
    except ValidationError as e:
        return _error(_validation_message(e))

    try:
        result = service.create_user(data)
    except ProvisioningError as e:
        return _error(e.message)
    logger.info(f"User {result.user.id if result.user else '?'} created by {caller.user_id}")
    return result.model_dump()


@router.api_route("/create-user", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def create_user_method_not_allowed():
    return _error("Method not allowed", status_code=405, headers={"Allow": "POST"})
