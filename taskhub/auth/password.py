import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Salted bcrypt hashing on top of passlib."""

    def __init__(self, rounds: int = 10):
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain_password: str) -> str:
        return self.pwd_context.hash(plain_password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        # A broken stored hash must read as a failed login, not a server error
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification failed on unusable hash: {type(e).__name__}")
            return False
