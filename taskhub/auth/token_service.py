"""Signed, time-bounded bearer tokens.

Two kinds share one implementation: access tokens (short lived, sent in the
``Authorization`` header) and refresh tokens (long lived, cookie only). Each
kind is signed with its own secret so a leaked access secret cannot mint
refresh tokens and the other way round.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from jose import ExpiredSignatureError, JWTError, jwt

from taskhub.configs import Settings
from taskhub.models import UserRole


class TokenKind(str, Enum):
    access = "access"
    refresh = "refresh"


@dataclass(frozen=True)
class TokenKindConfig:
    secret: str
    ttl: timedelta


@dataclass(frozen=True)
class Identity:
    subject_id: int
    role: UserRole


class TokenError(Exception):
    pass


class InvalidToken(TokenError):
    """Bad signature, malformed payload or unexpected claims."""


class ExpiredToken(TokenError):
    """Signature is fine but the token is past its expiry."""


class TokenService:

    def __init__(self, kinds: Mapping[TokenKind, TokenKindConfig], algorithm: str = "HS256"):
        missing = [kind.value for kind in TokenKind if kind not in kinds]
        if missing:
            raise ValueError(f"No token configuration for: {', '.join(missing)}")
        self.kinds = MappingProxyType(dict(kinds))
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> 'TokenService':
        return cls(
            {
                TokenKind.access: TokenKindConfig(
                    secret=settings.JWT_ACCESS_SECRET,
                    ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
                ),
                TokenKind.refresh: TokenKindConfig(
                    secret=settings.JWT_REFRESH_SECRET,
                    ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
                ),
            },
            algorithm=settings.JWT_ALGORITHM,
        )

    def lifetime(self, kind: TokenKind) -> timedelta:
        return self.kinds[kind].ttl

    def issue(self, kind: TokenKind, subject_id: int, role: UserRole) -> str:
        config = self.kinds[kind]
        now = datetime.now(UTC)
        to_encode = {
            "sub": str(subject_id),
            "role": UserRole(role).value,
            "type": kind.value,
            "iat": now,
            "exp": now + config.ttl,
        }
        return jwt.encode(to_encode, config.secret, algorithm=self.algorithm)

    def verify(self, kind: TokenKind, token: str) -> Identity:
        config = self.kinds[kind]
        try:
            payload = jwt.decode(token, config.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise ExpiredToken(f"{kind.value} token expired") from e
        except JWTError as e:
            raise InvalidToken(f"{kind.value} token rejected: {e}") from e

        if payload.get("type") != kind.value:
            raise InvalidToken(f"expected a {kind.value} token")
        try:
            subject_id = int(payload["sub"])
            role = UserRole(payload["role"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidToken(f"{kind.value} token has bad claims") from e
        return Identity(subject_id=subject_id, role=role)
