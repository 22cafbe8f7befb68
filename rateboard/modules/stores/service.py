from supabase import Client
from postgrest.exceptions import APIError
from rateboard.core.errors import http_error_from_api_error, not_found
from rateboard.core.policies import AppRole, Caller, Operation, is_allowed, visible_rows
from rateboard.database.supabase_client import fetch_all
from rateboard.database.triggers import touch_updated_at
from rateboard.modules.profiles.service import ProfileService
from rateboard.modules.stores.schemas import (
    StoreCreate, StoreUpdate, StoreResponse, StoreRatingResponse, StoreFeedbackResponse
)
from rateboard.modules.user_roles.service import UserRoleService
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


class StoreService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)
        self.user_roles = UserRoleService(supabase)

    def _fetch(self, store_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("stores")\
            .select("*")\
            .eq("id", store_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _own_ratings(self, caller: Caller) -> Dict[str, int]:
        if caller.user_id is None:
            return {}
        rows = fetch_all(lambda: self.supabase.table("ratings")
                         .select("id, store_id, rating")
                         .eq("user_id", caller.user_id)
                         .order("id"))
        return {r["store_id"]: r["rating"] for r in rows}

    def _with_user_rating(self, caller: Caller, rows: List[Dict[str, Any]]) -> List[StoreRatingResponse]:
        """Attach the caller's own rating to store_ratings rows"""
        rows = visible_rows(caller, "stores", rows)
        own = self._own_ratings(caller) if rows else {}
        return [StoreRatingResponse(**row, user_rating=own.get(row["id"])) for row in rows]

    def list_store_ratings(self, caller: Caller, search: Optional[str] = None) -> List[StoreRatingResponse]:
        """Every store with its current average rating and rating count"""
        try:
            rows = fetch_all(lambda: self.supabase.table("store_ratings")
                             .select("*")
                             .order("name")
                             .order("id"))
            if search:
                needle = search.lower()
                rows = [
                    r for r in rows
                    if any(needle in (r.get(field) or "").lower() for field in ("name", "email", "address"))
                ]
            return self._with_user_rating(caller, rows)
        except APIError as e:
            raise http_error_from_api_error(e)

    def get_store_rating(self, caller: Caller, store_id: str) -> StoreRatingResponse:
        try:
            result = self.supabase.table("store_ratings")\
                .select("*")\
                .eq("id", store_id)\
                .limit(1)\
                .execute()
            rows = self._with_user_rating(caller, result.data or [])
            if not rows:
                raise not_found("Store")
            return rows[0]
        except APIError as e:
            raise http_error_from_api_error(e)

    def list_owned_store_ratings(self, caller: Caller) -> List[StoreRatingResponse]:
        """Stores owned by the caller, with their aggregate"""
        try:
            rows = fetch_all(lambda: self.supabase.table("store_ratings")
                             .select("*")
                             .eq("owner_id", caller.user_id)
                             .order("name")
                             .order("id"))
            return self._with_user_rating(caller, rows)
        except APIError as e:
            raise http_error_from_api_error(e)

    def _resolve_owner_id(self, store_data: StoreCreate) -> str:
        if store_data.owner_id:
            return store_data.owner_id
        owner = self.profiles.find_by_email(store_data.owner_email)
        if not owner:
            raise HTTPException(status_code=404, detail="Owner not found with this email")
        return owner["id"]

    def create_store(self, caller: Caller, store_data: StoreCreate) -> StoreResponse:
        """Create a store for an owner and make that owner a store_owner (system_admin only)"""
        if not is_allowed(caller, "stores", Operation.INSERT, {}):
            raise HTTPException(status_code=403, detail="Only system admins can create stores")
        try:
            owner_id = self._resolve_owner_id(store_data)
            result = self.supabase.table("stores").insert({
                "name": store_data.name,
                "email": store_data.email,
                "address": store_data.address,
                "owner_id": owner_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create store")

            owner_roles = self.user_roles.list_roles(caller, user_id=owner_id)
            if not any(r.role == AppRole.SYSTEM_ADMIN for r in owner_roles):
                self.user_roles.assign_role(owner_id, AppRole.STORE_OWNER)

            return StoreResponse(**result.data[0])
        except APIError as e:
            raise http_error_from_api_error(e)

    def update_store(self, caller: Caller, store_id: str, store_data: StoreUpdate) -> StoreResponse:
        """Update a store as its owner or as system_admin. Only system_admin may change owner_id."""
        try:
            store = self._fetch(store_id)
            if store is None or not is_allowed(caller, "stores", Operation.UPDATE, store):
                raise not_found("Store")

            update_data = store_data.model_dump(exclude_none=True)
            if update_data.get("owner_id", store["owner_id"]) != store["owner_id"] and not caller.is_admin:
                raise HTTPException(status_code=403, detail="Only system admins can reassign store ownership")

            result = self.supabase.table("stores")\
                .update(touch_updated_at(update_data))\
                .eq("id", store_id)\
                .execute()

            if not result.data:
                raise not_found("Store")

            return StoreResponse(**result.data[0])
        except APIError as e:
            raise http_error_from_api_error(e)

    def delete_store(self, caller: Caller, store_id: str) -> bool:
        """Delete a store (system_admin only); its ratings cascade"""
        try:
            store = self._fetch(store_id)
            if store is None or not is_allowed(caller, "stores", Operation.DELETE, store):
                raise not_found("Store")
            result = self.supabase.table("stores")\
                .delete()\
                .eq("id", store_id)\
                .execute()
            return len(result.data or []) > 0
        except APIError as e:
            raise http_error_from_api_error(e)

    def _rater_profiles(self, caller: Caller) -> List[Dict[str, Any]]:
        """Profiles the caller may read: every row for system_admin, otherwise their own"""
        def build():
            query = self.supabase.table("profiles").select("id, name, email, address")
            if not caller.is_admin:
                query = query.eq("id", caller.user_id)
            return query.order("id")
        return visible_rows(caller, "profiles", fetch_all(build))

    def list_feedback(self, caller: Caller, store_id: str) -> List[StoreFeedbackResponse]:
        """
        Ratings left for a store, newest first. Rater details come from
        profiles and are only filled in where the caller may read that
        profile; everything else shows as "Unknown".
        """
        try:
            store = self._fetch(store_id)
            if store is None or not is_allowed(caller, "stores", Operation.SELECT, store):
                raise not_found("Store")

            ratings = visible_rows(caller, "ratings", fetch_all(
                lambda: self.supabase.table("ratings")
                .select("id, rating, created_at, user_id")
                .eq("store_id", store_id)
                .order("created_at", desc=True)
                .order("id")
            ))

            profiles: Dict[str, Dict[str, Any]] = {}
            if ratings:
                profiles = {p["id"]: p for p in self._rater_profiles(caller)}

            feedback = []
            for rating in ratings:
                profile = profiles.get(rating["user_id"], {})
                feedback.append(StoreFeedbackResponse(
                    id=rating["id"],
                    rating=rating["rating"],
                    created_at=rating.get("created_at"),
                    user_id=rating["user_id"],
                    user_name=profile.get("name") or UNKNOWN,
                    user_email=profile.get("email") or UNKNOWN,
                    user_address=profile.get("address") or UNKNOWN,
                ))
            return feedback
        except APIError as e:
            raise http_error_from_api_error(e)
