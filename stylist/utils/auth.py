# stylist/utils/auth.py
# Session token (JWT) handling, password hashing and opaque tokens

import os
import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from stylist.exceptions import InvalidTokenError, TokenExpiredError
from stylist.utils.clock import Clock, to_timestamp, utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_SCOPE = "session"
SET_PASSWORD_SCOPE = "set_password"

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
)


def configure_password_hashing(rounds: int) -> None:
    """Apply the configured bcrypt cost to new hashes."""
    pwd_context.update(bcrypt__rounds=rounds)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def dummy_verify() -> None:
    """Spend the time of a real verify so unknown emails are not distinguishable."""
    pwd_context.dummy_verify()


def generate_opaque_token() -> str:
    """32 random bytes as hex, used for verification and reset links."""
    return secrets.token_hex(32)


def hash_opaque_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenData(BaseModel):
    user_id: str
    issued_at: float
    scope: str = SESSION_SCOPE


class TokenService:
    """Issues and verifies signed session tokens."""

    def __init__(
        self,
        secret_key: Optional[str],
        algorithm: str = ALGORITHM,
        expire_days: int = 30,
        clock: Clock = utcnow,
    ):
        if not secret_key:
            raise RuntimeError("JWT_SECRET is not defined in environment variables")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = timedelta(days=expire_days)
        self.clock = clock

    def issue_session_token(self, user_id: str, scope: str = SESSION_SCOPE) -> str:
        issued_at = to_timestamp(self.clock())
        to_encode = {
            "sub": user_id,
            "iat": issued_at,
            "exp": int(issued_at + self.expires_delta.total_seconds()),
            "scope": scope,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_session_token(self, token: str) -> TokenData:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            logger.warning(f"Rejected session token: {e}")
            raise InvalidTokenError()

        user_id = payload.get("sub")
        issued_at = payload.get("iat")
        if not user_id or issued_at is None:
            raise InvalidTokenError()
        return TokenData(
            user_id=user_id,
            issued_at=float(issued_at),
            scope=payload.get("scope", SESSION_SCOPE),
        )
