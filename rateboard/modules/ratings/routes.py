from fastapi import APIRouter, Depends
from rateboard.core.dependencies import get_caller, get_optional_caller
from rateboard.core.policies import Caller
from rateboard.database.supabase_client import get_service_supabase
from rateboard.modules.ratings.schemas import (
    RatingSubmit, RatingUpdate, RatingResponse, RatingSubmitResponse
)
from rateboard.modules.ratings.service import RatingService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/ratings", tags=["ratings"])


def get_rating_service(supabase: Client = Depends(get_service_supabase)) -> RatingService:
    return RatingService(supabase)


@router.get("", response_model=List[RatingResponse])
async def list_ratings(
    store_id: Optional[str] = None,
    user_id: Optional[str] = None,
    caller: Caller = Depends(get_optional_caller),
    service: RatingService = Depends(get_rating_service)
):
    return service.list_ratings(caller, store_id=store_id, user_id=user_id)


@router.post("", response_model=RatingSubmitResponse)
async def submit_rating(
    rating_data: RatingSubmit,
    caller: Caller = Depends(get_caller),
    service: RatingService = Depends(get_rating_service)
):
    """Rate a store 1-5. Resubmitting replaces the caller's previous rating."""
    return service.submit_rating(caller, rating_data)


@router.put("/{rating_id}", response_model=RatingResponse)
async def update_rating(
    rating_id: str,
    rating_data: RatingUpdate,
    caller: Caller = Depends(get_caller),
    service: RatingService = Depends(get_rating_service)
):
    return service.update_rating(caller, rating_id, rating_data)


@router.delete("/{rating_id}", status_code=204)
async def delete_rating(
    rating_id: str,
    caller: Caller = Depends(get_caller),
    service: RatingService = Depends(get_rating_service)
):
    service.delete_rating(caller, rating_id)
    return None
