import logging
import math
from typing import Optional

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from taskhub.auth.password import PasswordHasher
from taskhub.errors import Conflict, MissingField, NotFound, ValidationError
from taskhub.models import User, UserRole
from taskhub.schemas.user_schema import UserCreateRequest, UserPage, UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    statement = select(User).where(User.email == email)
    return db.exec(statement).first()


def create_user(user_req: UserCreateRequest, db: Session, hasher: PasswordHasher) -> UserResponse:
    if not user_req.username or not user_req.email or not user_req.password:
        raise MissingField()
    # fast path; the unique index on email is what actually guards concurrent sign-ups
    if get_user_by_email(user_req.email, db):
        raise Conflict()

    user = User(
        username=user_req.username,
        email=user_req.email,
        password=hasher.hash(user_req.password),
        role=user_req.role or UserRole.user,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Registration raced on an existing email")
        raise Conflict()
    db.refresh(user)
    logger.info(f"User {user.id} registered with role {user.role.value}")
    return UserResponse.from_user(user)


def get_user(user_id: int, db: Session) -> UserResponse:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return UserResponse.from_user(user)


def list_users(db: Session, page: int = 1, limit: int = 10) -> UserPage:
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")
    total = db.exec(select(func.count()).select_from(User)).one()
    statement = select(User).order_by(User.id).offset((page - 1) * limit).limit(limit)
    users = db.exec(statement).all()
    return UserPage(
        current_page=page,
        total_users=total,
        total_pages=math.ceil(total / limit),
        users=[UserResponse.from_user(user) for user in users],
    )


def update_user(user_id: int, user_req: UserUpdateRequest, db: Session) -> UserResponse:
    # empty values are ignored, same as leaving them out
    values = {key: value for key, value in user_req.model_dump().items() if value}
    if values:
        try:
            result = db.exec(update(User).where(User.id == user_id).values(**values))
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Email already in use")
        if result.rowcount == 0:
            raise NotFound("User not found")
    return get_user(user_id, db)


def delete_user(user_id: int, db: Session):
    result = db.exec(delete(User).where(User.id == user_id))
    db.commit()
    if result.rowcount == 0:
        raise NotFound("User not found")
    logger.info(f"User {user_id} deleted")
