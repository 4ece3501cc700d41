"""Login, refresh and logout.

Sessions are stateless: the refresh token lives only in an HTTP-only cookie
and logout just clears that cookie. A refresh token issued before logout
stays valid until it expires; there is no server-side revocation.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Response
from sqlmodel import Session, select

from taskhub.auth.password import PasswordHasher
from taskhub.auth.token_service import TokenError, TokenKind, TokenService
from taskhub.errors import BadCredentials, MissingField, NoSuchUser, Unauthenticated
from taskhub.models import User

logger = logging.getLogger(__name__)

REFRESH_COOKIE_NAME = "refresh_token"
REFRESH_COOKIE_PATH = "/auth"


@dataclass
class SessionTokens:
    access_token: str
    user: User
    refresh_token: Optional[str] = None


class SessionManager:

    def __init__(self, tokens: TokenService, hasher: PasswordHasher, secure_cookies: bool = True):
        self.tokens = tokens
        self.hasher = hasher
        self.secure_cookies = secure_cookies

    def login(self, db: Session, email: str | None, password: str | None) -> SessionTokens:
        if not email or not password:
            raise MissingField()

        user = db.exec(select(User).where(User.email == email)).first()
        if not user:
            logger.info("Login rejected: no such user")
            raise NoSuchUser()
        if not self.hasher.verify(password, user.password):
            logger.info(f"Login rejected: bad credentials for user {user.id}")
            raise BadCredentials()

        logger.info(f"User {user.id} logged in")
        return SessionTokens(
            access_token=self.tokens.issue(TokenKind.access, user.id, user.role),
            refresh_token=self.tokens.issue(TokenKind.refresh, user.id, user.role),
            user=user,
        )

    def refresh(self, db: Session, refresh_token: str | None) -> SessionTokens:
        if not refresh_token:
            raise Unauthenticated("No refresh token provided")
        try:
            identity = self.tokens.verify(TokenKind.refresh, refresh_token)
        except TokenError as e:
            logger.info(f"Refresh rejected: {type(e).__name__}: {e}")
            raise Unauthenticated("Invalid refresh token")

        user = db.get(User, identity.subject_id)
        if not user:
            logger.info(f"Refresh rejected: user {identity.subject_id} no longer exists")
            raise NoSuchUser("User not found")

        # role comes from the stored record, so a demotion shows up on the next refresh
        return SessionTokens(
            access_token=self.tokens.issue(TokenKind.access, user.id, user.role),
            user=user,
        )

    def set_refresh_cookie(self, response: Response, refresh_token: str):
        response.set_cookie(
            key=REFRESH_COOKIE_NAME,
            value=refresh_token,
            max_age=int(self.tokens.lifetime(TokenKind.refresh).total_seconds()),
            path=REFRESH_COOKIE_PATH,
            secure=self.secure_cookies,
            httponly=True,
            samesite="strict",
        )

    def logout(self, response: Response):
        response.delete_cookie(
            key=REFRESH_COOKIE_NAME,
            path=REFRESH_COOKIE_PATH,
            secure=self.secure_cookies,
            httponly=True,
            samesite="strict",
        )
