from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

from rateboard.core.policies import AppRole


class ProfileCreate(BaseModel):
    id: str
    name: str
    email: EmailStr
    address: str = ""


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None


class ProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileWithRoleResponse(ProfileResponse):
    role: Optional[AppRole] = None
