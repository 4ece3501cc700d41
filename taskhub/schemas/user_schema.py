from typing import List, Optional

from pydantic import BaseModel

from taskhub.models import UserRole, User


class UserCreateRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None


class UserUpdateRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: UserRole

    @staticmethod
    def from_user(user: User | None) -> Optional['UserResponse']:
        if user is None:
            return None
        return UserResponse.model_validate(user.model_dump())


class UserMessageResponse(BaseModel):
    message: str
    user: UserResponse


class UserPage(BaseModel):
    current_page: int
    total_users: int
    total_pages: int
    users: List[UserResponse]
