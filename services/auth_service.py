"""Business logic for account registration, login and token checks."""
from __future__ import annotations

import logging
from typing import Any

from core.errors import ConflictError, UnauthorizedError, ValidationError
from core.security import PasswordHasher, TokenManager
from schemas.user import LoginResult, Principal, RegisterResult, Role
from utils.validators import validate_email, validate_register_input

logger = logging.getLogger(__name__)

# Same message and code whether the account is unknown or the password is wrong
_INVALID_CREDENTIALS = ("Invalid email or password", "INVALID_CREDENTIALS")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Account operations. Holds no per-request state."""

    def __init__(self, repo, hasher: PasswordHasher, tokens: TokenManager):
        self.repo = repo
        self.hasher = hasher
        self.tokens = tokens

    def register(self, name: Any, email: Any, password: Any) -> RegisterResult:
        """Create a ``user`` account.

        Raises:
            ValidationError: MISSING_NAME, INVALID_EMAIL or WEAK_PASSWORD
            ConflictError: DUPLICATE_EMAIL
        """
        name, email, password = validate_register_input(name, email, password)
        email = normalize_email(email)
        if self.repo.find_by_email(email):
            raise ConflictError("Email already exists", "DUPLICATE_EMAIL")
        password_hash = self.hasher.hash(password)
        user = self.repo.create(name=name, email=email, password_hash=password_hash, role=Role.USER)
        logger.info("Registered account %s", user.email, extra={"user_id": user.id})
        return RegisterResult(user=user)

    def login(self, email: Any, password: Any) -> LoginResult:
        """Check credentials and issue an access token.

        Raises:
            ValidationError: MISSING_EMAIL, INVALID_EMAIL or MISSING_PASSWORD
            UnauthorizedError: INVALID_CREDENTIALS
        """
        if not isinstance(email, str) or not email.strip():
            raise ValidationError("Email is required", "MISSING_EMAIL")
        email = normalize_email(email)
        validate_email(email)
        if not isinstance(password, str) or not password:
            raise ValidationError("Password is required", "MISSING_PASSWORD")

        account = self.repo.find_by_email_with_password(email)
        if not account:
            logger.warning("Login rejected: unknown account")
            raise UnauthorizedError(*_INVALID_CREDENTIALS)
        if not self.hasher.verify(password, account.password_hash):
            logger.warning("Login rejected: bad password", extra={"user_id": account.id})
            raise UnauthorizedError(*_INVALID_CREDENTIALS)

        user = account.public()
        token = self.tokens.sign(user)
        logger.info("Login succeeded for %s", user.email, extra={"user_id": user.id})
        return LoginResult(user=user, token=token, is_admin=user.role is Role.ADMIN)

    def authenticate(self, token: str) -> Principal:
        """Resolve a bearer token to the caller's identity."""
        if not token:
            raise UnauthorizedError("Access denied. No token provided.", "NO_TOKEN")
        return self.tokens.verify(token)


__all__ = ["AuthService", "normalize_email"]
