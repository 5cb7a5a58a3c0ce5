from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    mobile: str = Field(..., min_length=3, max_length=20)
    password: str = Field(..., min_length=4)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict  # User information


class RegisterRequest(BaseModel):
    mobile: str = Field(..., min_length=3, max_length=20)
    password: str = Field(..., min_length=4)
    name: str = Field(min_length=1, max_length=255)


class RegisterResponse(BaseModel):
    id: int
    user_id: str
    mobile: str
    name: str


class Logout(BaseModel):
    message: str


class VerifyResponse(BaseModel):
    valid: bool = True
    user: dict


class UserResponse(BaseModel):
    id: int
    user_id: str
    mobile: str
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReauthRequest(BaseModel):
    """Fresh credential proof required in the body of destructive requests."""
    mobile: Optional[str] = None
    password: Optional[str] = None


class DeleteResponse(BaseModel):
    message: str
