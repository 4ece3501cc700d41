from typing import Optional

from pydantic import BaseModel

from taskhub.models import UserRole
from taskhub.schemas.user_schema import UserResponse


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class IdentityResponse(BaseModel):
    id: int
    role: UserRole


class LogoutResponse(BaseModel):
    message: str
    user: Optional[IdentityResponse] = None
