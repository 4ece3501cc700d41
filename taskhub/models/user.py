from enum import Enum
from sqlmodel import Field, SQLModel


class UserRole(str, Enum):
    user = "user"
    admin = "admin"


class User(SQLModel, table=True):
    """User model represents an account in the system."""
    # ids are never handed out twice, so a token for a deleted user stays dead
    __table_args__ = {"sqlite_autoincrement": True}

    id: int = Field(default=None, primary_key=True)
    username: str
    email: str = Field(unique=True, index=True)
    password: str = Field(exclude=True)
    role: UserRole = Field(default=UserRole.user)
