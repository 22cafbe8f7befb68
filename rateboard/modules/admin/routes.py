from fastapi import APIRouter, Depends
from rateboard.core.dependencies import require_role
from rateboard.core.policies import AppRole, Caller
from rateboard.database.supabase_client import get_service_supabase
from rateboard.modules.admin.schemas import DashboardStats
from rateboard.modules.admin.service import AdminService
from supabase import Client

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminService:
    return AdminService(supabase)


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    caller: Caller = Depends(require_role(AppRole.SYSTEM_ADMIN)),
    service: AdminService = Depends(get_admin_service)
):
    """Total users, stores and ratings (system_admin only)"""
    return service.get_stats()
