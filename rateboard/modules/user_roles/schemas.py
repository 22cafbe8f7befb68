from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from rateboard.core.policies import AppRole


class UserRoleCreate(BaseModel):
    user_id: str
    role: AppRole


class UserRoleAssign(BaseModel):
    role: AppRole


class UserRoleResponse(BaseModel):
    id: str
    user_id: str
    role: AppRole
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
