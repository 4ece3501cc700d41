import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from taskhub.auth.password import PasswordHasher
from taskhub.auth.session_manager import SessionManager
from taskhub.auth.token_service import Identity, TokenError, TokenKind, TokenService
from taskhub.errors import Forbidden, Unauthenticated
from taskhub.models import UserRole

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_current_identity(
        request: Request,
        token: Optional[str] = Depends(oauth2_scheme),
        tokens: TokenService = Depends(get_token_service),
) -> Identity:
    if not token:
        raise Unauthenticated("No token provided")
    try:
        identity = tokens.verify(TokenKind.access, token)
    except TokenError as e:
        logger.info(f"Access token rejected: {type(e).__name__}: {e}")
        raise Unauthenticated("Invalid or expired token")
    request.state.identity = identity
    return identity


def get_optional_identity(
        request: Request,
        token: Optional[str] = Depends(oauth2_scheme),
        tokens: TokenService = Depends(get_token_service),
) -> Optional[Identity]:
    if not token:
        return None
    try:
        return get_current_identity(request, token, tokens)
    except Unauthenticated:
        return None


def require_role(required_role: UserRole):
    """Dependency factory: authenticated identity whose role is exactly `required_role`."""
    required_role = UserRole(required_role)

    def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role is not required_role:
            logger.info(f"User {identity.subject_id} ({identity.role.value}) denied {required_role.value} route")
            raise Forbidden(f"Access denied: {required_role.value}s only")
        return identity

    return checker


require_admin = require_role(UserRole.admin)
