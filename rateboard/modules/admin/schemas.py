from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_users: int
    total_stores: int
    total_ratings: int
