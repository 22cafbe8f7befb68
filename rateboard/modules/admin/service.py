from supabase import Client
from postgrest.exceptions import APIError
from rateboard.core.errors import http_error_from_api_error
from rateboard.modules.admin.schemas import DashboardStats


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _count(self, table: str) -> int:
        result = self.supabase.table(table)\
            .select("id", count="exact")\
            .execute()
        if result.count is not None:
            return result.count
        return len(result.data or [])

    def get_stats(self) -> DashboardStats:
        """Row counts for the admin dashboard"""
        try:
            return DashboardStats(
                total_users=self._count("profiles"),
                total_stores=self._count("stores"),
                total_ratings=self._count("ratings")
            )
        except APIError as e:
            raise http_error_from_api_error(e)
