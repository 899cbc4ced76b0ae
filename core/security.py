"""Password hashing and JWT access tokens.

Both primitives are small objects built once by the app factory and handed
to ``AuthService``; services never reach for ``current_app``.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional

import jwt
from flask_bcrypt import Bcrypt

from core.errors import UnauthorizedError
from schemas.user import Principal, UserRecord
from utils.timezone_utils import now_utc

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10
DEFAULT_TOKEN_TTL = timedelta(days=7)


class PasswordHasher:
    """Salted bcrypt hashing with a fixed cost factor."""

    def __init__(self, bcrypt: Optional[Bcrypt] = None, rounds: Optional[int] = None):
        self._bcrypt = bcrypt or Bcrypt()
        # None -> whatever the Bcrypt instance was configured with (BCRYPT_LOG_ROUNDS)
        self._rounds = rounds

    def hash(self, password: str) -> str:
        return self._bcrypt.generate_password_hash(password, rounds=self._rounds).decode('utf-8')

    def verify(self, password: str, pw_hash: str) -> bool:
        try:
            return self._bcrypt.check_password_hash(pw_hash, password)
        except ValueError:
            # Stored value is not a bcrypt hash; treat like a mismatch
            logger.warning("Stored password hash is malformed")
            return False


class TokenManager:
    """Sign and verify HS256 access tokens.

    Payload: ``sub`` (account id), ``email``, ``role``, ``iat``, ``exp``.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: timedelta = DEFAULT_TOKEN_TTL):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.expires_in = expires_in

    def sign(self, user: UserRecord, expires_in: Optional[timedelta] = None) -> str:
        issued = now_utc()
        payload: dict[str, Any] = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
            "iat": issued,
            "exp": issued + (expires_in if expires_in is not None else self.expires_in),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """Raw claims; raises ``jwt.InvalidTokenError`` subclasses."""
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            options={"require": ["exp", "sub"]},
        )

    def verify(self, token: str) -> Principal:
        try:
            payload = self.decode(token)
        except jwt.ExpiredSignatureError:
            logger.info("Expired token presented")
            raise UnauthorizedError("Invalid or expired token", "INVALID_TOKEN")
        except jwt.InvalidTokenError as e:
            logger.info("Invalid token presented: %s", e)
            raise UnauthorizedError("Invalid or expired token", "INVALID_TOKEN")
        return Principal(id=str(payload["sub"]), email=payload.get("email") or "", role=payload.get("role"))


__all__ = ["PasswordHasher", "TokenManager", "DEFAULT_ROUNDS", "DEFAULT_TOKEN_TTL"]
