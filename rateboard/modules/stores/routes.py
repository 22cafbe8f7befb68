from fastapi import APIRouter, Depends
from rateboard.core.dependencies import get_caller, get_optional_caller
from rateboard.core.policies import Caller
from rateboard.database.supabase_client import get_service_supabase
from rateboard.modules.stores.schemas import (
    StoreCreate, StoreUpdate, StoreResponse, StoreRatingResponse, StoreFeedbackResponse
)
from rateboard.modules.stores.service import StoreService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/stores", tags=["stores"])


def get_store_service(supabase: Client = Depends(get_service_supabase)) -> StoreService:
    return StoreService(supabase)


@router.get("", response_model=List[StoreRatingResponse])
async def list_stores(
    search: Optional[str] = None,
    caller: Caller = Depends(get_optional_caller),
    service: StoreService = Depends(get_store_service)
):
    """List stores with average rating and rating count (public). Filter by name or address with `search`."""
    return service.list_store_ratings(caller, search=search)


@router.post("", response_model=StoreResponse, status_code=201)
async def create_store(
    store_data: StoreCreate,
    caller: Caller = Depends(get_caller),
    service: StoreService = Depends(get_store_service)
):
    """Create a store (system_admin only). The owner is promoted to store_owner."""
    return service.create_store(caller, store_data)


@router.get("/mine", response_model=List[StoreRatingResponse])
async def list_my_stores(
    caller: Caller = Depends(get_caller),
    service: StoreService = Depends(get_store_service)
):
    return service.list_owned_store_ratings(caller)


@router.get("/{store_id}", response_model=StoreRatingResponse)
async def get_store(
    store_id: str,
    caller: Caller = Depends(get_optional_caller),
    service: StoreService = Depends(get_store_service)
):
    return service.get_store_rating(caller, store_id)


@router.put("/{store_id}", response_model=StoreResponse)
async def update_store(
    store_id: str,
    store_data: StoreUpdate,
    caller: Caller = Depends(get_caller),
    service: StoreService = Depends(get_store_service)
):
    """Update a store (its owner or system_admin)"""
    return service.update_store(caller, store_id, store_data)


@router.delete("/{store_id}", status_code=204)
async def delete_store(
    store_id: str,
    caller: Caller = Depends(get_caller),
    service: StoreService = Depends(get_store_service)
):
    service.delete_store(caller, store_id)
    return None


@router.get("/{store_id}/ratings", response_model=List[StoreFeedbackResponse])
async def list_store_feedback(
    store_id: str,
    caller: Caller = Depends(get_caller),
    service: StoreService = Depends(get_store_service)
):
    """Ratings received by a store with rater details, newest first"""
    return service.list_feedback(caller, store_id)
