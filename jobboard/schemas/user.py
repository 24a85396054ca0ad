from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """Sign-up payload. Password strength is checked by the user service."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    admin: bool = False
    created_at: datetime

    @field_validator("admin", mode="before")
    @classmethod
    def _null_admin_is_false(cls, value):
        # NULL in the column means "not an admin"
        return bool(value)


class AdminFlagUpdate(BaseModel):
    admin: bool


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
