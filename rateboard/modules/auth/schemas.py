from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

from rateboard.core.policies import AppRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None
    address: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class PasswordUpdateRequest(BaseModel):
    password: str

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please enter a new password")
        return value


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: dict = {}
    role: Optional[AppRole] = None
