from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

from rateboard.core.policies import AppRole


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None
    address: Optional[str] = None
    role: Optional[AppRole] = None

    @field_validator("password")
    @classmethod
    def password_present(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value

    @field_validator("role", mode="before")
    @classmethod
    def blank_role_is_default(cls, value):
        return value or None


class ProvisionedUser(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: dict = {}


class CreateUserResponse(BaseModel):
    success: bool = True
    user: Optional[ProvisionedUser] = None
