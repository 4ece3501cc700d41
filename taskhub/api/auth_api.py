from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlmodel import Session

from taskhub.auth.auth_handler import get_optional_identity, get_password_hasher, get_session_manager
from taskhub.auth.password import PasswordHasher
from taskhub.auth.session_manager import SessionManager
from taskhub.auth.token_service import Identity
from taskhub.configs.database import get_db
from taskhub.schemas.token import IdentityResponse, LoginRequest, LogoutResponse, Token
from taskhub.schemas.user_schema import UserCreateRequest, UserMessageResponse, UserResponse
from taskhub.services import user_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=UserMessageResponse, status_code=status.HTTP_201_CREATED)
def register(user_req: UserCreateRequest, db: Session = Depends(get_db),
             hasher: PasswordHasher = Depends(get_password_hasher)):
    user = user_service.create_user(user_req, db, hasher)
    return {"message": "User registered successfully", "user": user}


@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, response: Response, db: Session = Depends(get_db),
          sessions: SessionManager = Depends(get_session_manager)):
    tokens = sessions.login(db, credentials.email, credentials.password)
    sessions.set_refresh_cookie(response, tokens.refresh_token)
    return {"access_token": tokens.access_token, "user": UserResponse.from_user(tokens.user)}


@router.post("/refresh", response_model=Token)
def refresh(refresh_token: Optional[str] = Cookie(None), db: Session = Depends(get_db),
            sessions: SessionManager = Depends(get_session_manager)):
    tokens = sessions.refresh(db, refresh_token)
    return {"access_token": tokens.access_token, "user": UserResponse.from_user(tokens.user)}


@router.post("/logout", response_model=LogoutResponse)
def logout(response: Response, identity: Optional[Identity] = Depends(get_optional_identity),
           sessions: SessionManager = Depends(get_session_manager)):
    sessions.logout(response)
    user = IdentityResponse(id=identity.subject_id, role=identity.role) if identity else None
    return {"message": "Logout successful", "user": user}
