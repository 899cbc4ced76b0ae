from datetime import timedelta

import jwt
import pytest

from core.errors import UnauthorizedError
from core.security import PasswordHasher, TokenManager
from schemas.user import Role, UserRecord


@pytest.fixture
def user():
    return UserRecord(id="64b000000000000000000001", name="Ann", email="ann@example.com", role=Role.ADMIN)


class TestPasswordHasher:

    def test_hash_and_verify(self, hasher):
        pw_hash = hasher.hash("password123")
        assert pw_hash != "password123"
        assert hasher.verify("password123", pw_hash)
        assert not hasher.verify("password124", pw_hash)

    def test_salted(self, hasher):
        assert hasher.hash("password123") != hasher.hash("password123")

    def test_malformed_hash_is_a_mismatch(self, hasher):
        assert hasher.verify("password123", "not-a-bcrypt-hash") is False


class TestTokenManager:

    def test_claims(self, tokens, user):
        claims = tokens.decode(tokens.sign(user))
        assert claims["sub"] == user.id
        assert claims["email"] == "ann@example.com"
        assert claims["role"] == "admin"
        assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())

    def test_verify_returns_principal(self, tokens, user):
        principal = tokens.verify(tokens.sign(user))
        assert principal.id == user.id
        assert principal.role is Role.ADMIN
        assert principal.is_admin

    def test_expired(self, tokens, user):
        token = tokens.sign(user, expires_in=timedelta(seconds=-10))
        with pytest.raises(UnauthorizedError) as exc_info:
            tokens.verify(token)
        assert exc_info.value.code == "INVALID_TOKEN"

    def test_wrong_secret(self, user):
        token = TokenManager("another-secret-that-is-long-enough!!").sign(user)
        with pytest.raises(UnauthorizedError):
            TokenManager("test-jwt-secret-key-with-enough-length").verify(token)

    def test_missing_sub_claim(self, tokens):
        token = jwt.encode({"email": "x@y.com", "exp": 9999999999}, "test-jwt-secret-key-with-enough-length", algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            tokens.verify(token)

    def test_unknown_role_claim_is_not_admin(self, tokens):
        token = jwt.encode({"sub": "1", "role": "Admin", "exp": 9999999999}, "test-jwt-secret-key-with-enough-length", algorithm="HS256")
        principal = tokens.verify(token)
        assert principal.role is None
        assert not principal.is_admin

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenManager("")
