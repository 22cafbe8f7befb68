from supabase import Client
from postgrest.exceptions import APIError
from rateboard.core.errors import http_error_from_api_error, not_found
from rateboard.core.policies import Caller, Operation, is_allowed, visible_rows
from rateboard.database.triggers import touch_updated_at
from rateboard.modules.ratings.schemas import (
    RatingSubmit, RatingUpdate, RatingResponse, RatingSubmitResponse
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class RatingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _fetch(self, rating_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("ratings")\
            .select("*")\
            .eq("id", rating_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def list_ratings(
        self,
        caller: Caller,
        store_id: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> List[RatingResponse]:
        """List ratings (public), optionally filtered by store and/or user"""
        try:
            query = self.supabase.table("ratings").select("*")
            if store_id:
                query = query.eq("store_id", store_id)
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.order("created_at", desc=True).execute()
            return [RatingResponse(**row) for row in visible_rows(caller, "ratings", result.data or [])]
        except APIError as e:
            raise http_error_from_api_error(e)

    def submit_rating(self, caller: Caller, rating_data: RatingSubmit) -> RatingSubmitResponse:
        """
        Rate a store as the caller. Overwrites the caller's existing rating
        for the store, otherwise inserts a new one. Two concurrent first
        submissions both take the insert path; the (user_id, store_id)
        unique constraint rejects the second with 409.
        """
        row = {
            "user_id": caller.user_id,
            "store_id": rating_data.store_id,
            "rating": rating_data.rating
        }
        if not is_allowed(caller, "ratings", Operation.INSERT, row):
            raise HTTPException(status_code=403, detail="You can only submit your own ratings")
        try:
            existing = self.supabase.table("ratings")\
                .select("id")\
                .eq("user_id", caller.user_id)\
                .eq("store_id", rating_data.store_id)\
                .limit(1)\
                .execute()

            if existing.data:
                result = self.supabase.table("ratings")\
                    .update(touch_updated_at({"rating": rating_data.rating}))\
                    .eq("user_id", caller.user_id)\
                    .eq("store_id", rating_data.store_id)\
                    .execute()
                created = False
            else:
                result = self.supabase.table("ratings").insert(row).execute()
                created = True

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save rating")

            return RatingSubmitResponse(
                rating=RatingResponse(**result.data[0]),
                created=created,
                message="Rating submitted successfully" if created else "Rating updated successfully"
            )
        except APIError as e:
            raise http_error_from_api_error(e)

    def update_rating(self, caller: Caller, rating_id: str, rating_data: RatingUpdate) -> RatingResponse:
        """Change one of the caller's own ratings"""
        try:
            rating = self._fetch(rating_id)
            if rating is None or not is_allowed(caller, "ratings", Operation.UPDATE, rating):
                raise not_found("Rating")
            result = self.supabase.table("ratings")\
                .update(touch_updated_at({"rating": rating_data.rating}))\
                .eq("id", rating_id)\
                .execute()
            if not result.data:
                raise not_found("Rating")
            return RatingResponse(**result.data[0])
        except APIError as e:
            raise http_error_from_api_error(e)

    def delete_rating(self, caller: Caller, rating_id: str) -> bool:
        """Withdraw one of the caller's own ratings"""
        try:
            rating = self._fetch(rating_id)
            if rating is None or not is_allowed(caller, "ratings", Operation.DELETE, rating):
                raise not_found("Rating")
            result = self.supabase.table("ratings")\
                .delete()\
                .eq("id", rating_id)\
                .execute()
            return len(result.data or []) > 0
        except APIError as e:
            raise http_error_from_api_error(e)
