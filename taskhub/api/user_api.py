from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlmodel import Session

from taskhub.auth.auth_handler import get_current_identity, get_password_hasher, require_admin
from taskhub.auth.password import PasswordHasher
from taskhub.auth.token_service import Identity
from taskhub.configs.database import get_db
from taskhub.models import MAX_ID
from taskhub.schemas.user_schema import (
    UserCreateRequest,
    UserMessageResponse,
    UserPage,
    UserResponse,
    UserUpdateRequest,
)
from taskhub.services import user_service

router = APIRouter(prefix="/users", tags=["users"])

UserId = Annotated[int, Path(le=MAX_ID)]


# /me routes go first so they are not shadowed by /{user_id}
@router.get("/me", response_model=UserResponse)
def get_profile(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return user_service.get_user(identity.subject_id, db)


@router.put("/me", response_model=UserResponse)
def update_profile(user_req: UserUpdateRequest, identity: Identity = Depends(get_current_identity),
                   db: Session = Depends(get_db)):
    return user_service.update_user(identity.subject_id, user_req, db)


@router.delete("/me")
def delete_profile(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    user_service.delete_user(identity.subject_id, db)
    return {"message": "Account deleted successfully"}


@router.get("", response_model=UserPage)
def list_users(page: int = Query(1), limit: int = Query(10), db: Session = Depends(get_db),
               admin: Identity = Depends(require_admin)):
    return user_service.list_users(db, page, limit)


@router.post("", response_model=UserMessageResponse, status_code=status.HTTP_201_CREATED)
def create_user(user_req: UserCreateRequest, db: Session = Depends(get_db),
                hasher: PasswordHasher = Depends(get_password_hasher),
                admin: Identity = Depends(require_admin)):
    user = user_service.create_user(user_req, db, hasher)
    return {"message": "User created successfully", "user": user}


@router.put("/{user_id}", response_model=UserMessageResponse)
def update_user(user_id: UserId, user_req: UserUpdateRequest, db: Session = Depends(get_db),
                admin: Identity = Depends(require_admin)):
    user = user_service.update_user(user_id, user_req, db)
    return {"message": "User updated successfully", "user": user}


@router.delete("/{user_id}")
def delete_user(user_id: UserId, db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    user_service.delete_user(user_id, db)
    return {"message": "User deleted successfully"}
