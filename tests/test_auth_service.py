"""AuthService tests against the in-memory user repository."""
import pytest

from core.errors import ConflictError, UnauthorizedError, ValidationError
from schemas.user import Role
from services.auth_service import AuthService, normalize_email


@pytest.fixture
def service(memory_users, hasher, tokens):
    return AuthService(memory_users, hasher, tokens)


@pytest.fixture
def registered(service):
    return service.register("John Doe", "john@example.com", "password123").user


def test_normalize_email():
    assert normalize_email("  John@Example.COM ") == "john@example.com"


class TestRegister:

    def test_creates_user_role_account(self, service, registered):
        assert registered.name == "John Doe"
        assert registered.email == "john@example.com"
        assert registered.role is Role.USER
        assert registered.id

    def test_result_never_exposes_password(self, service):
        result = service.register("Jane", "jane@example.com", "password123")
        dumped = result.model_dump(mode='json', by_alias=True)
        assert "password" not in dumped["user"]
        assert "password_hash" not in dumped["user"]

    def test_password_is_stored_hashed(self, service, memory_users, registered):
        stored = memory_users.find_by_email_with_password("john@example.com")
        assert stored.password_hash != "password123"
        assert stored.password_hash.startswith("$2")

    def test_duplicate_email(self, service, registered):
        with pytest.raises(ConflictError) as exc_info:
            service.register("Other", "john@example.com", "password456")
        assert exc_info.value.code == "DUPLICATE_EMAIL"

    def test_duplicate_email_ignores_case(self, service, registered):
        with pytest.raises(ConflictError):
            service.register("Other", "JOHN@Example.com", "password456")

    @pytest.mark.parametrize("name,email,password,code", [
        ("", "a@b.com", "password123", "MISSING_NAME"),
        ("   ", "a@b.com", "password123", "MISSING_NAME"),
        (None, "a@b.com", "password123", "MISSING_NAME"),
        ("Ann", "not-an-email", "password123", "INVALID_EMAIL"),
        ("Ann", "a@b.com", "12345", "WEAK_PASSWORD"),
    ])
    def test_rejects_bad_input(self, service, memory_users, name, email, password, code):
        with pytest.raises(ValidationError) as exc_info:
            service.register(name, email, password)
        assert exc_info.value.code == code
        assert memory_users.docs == {}

    def test_password_longer_than_bcrypt_accepts(self, service, memory_users):
        with pytest.raises(ValidationError) as exc_info:
            service.register("Ann", "ann@example.com", "x" * 100)

        assert exc_info.value.code == "PASSWORD_TOO_LONG"
        assert memory_users.docs == {}

    def test_password_at_byte_limit_registers(self, service):
        assert service.register("Ann", "ann@example.com", "x" * 72).user.email == "ann@example.com"

    def test_validation_runs_before_duplicate_check(self, user_repo, hasher, tokens):
        service = AuthService(user_repo, hasher, tokens)
        with pytest.raises(ValidationError):
            service.register("Ann", "bad", "password123")
        user_repo.find_by_email.assert_not_called()


class TestLogin:

    def test_returns_token_and_user(self, service, tokens, registered):
        result = service.login("john@example.com", "password123")

        assert result.user.email == "john@example.com"
        assert result.is_admin is False
        claims = tokens.decode(result.token)
        assert claims["sub"] == registered.id
        assert claims["role"] == "user"
        assert result.model_dump(by_alias=True)["isAdmin"] is False

    def test_email_is_normalized(self, service, registered):
        assert service.login("  JOHN@example.com ", "password123").user.id == registered.id

    def test_admin_flag(self, service, memory_users, registered):
        memory_users.set_role("john@example.com", Role.ADMIN)
        result = service.login("john@example.com", "password123")
        assert result.is_admin is True
        assert result.user.role is Role.ADMIN

    def test_unknown_account_and_wrong_password_look_the_same(self, service, registered):
        with pytest.raises(UnauthorizedError) as unknown:
            service.login("nobody@example.com", "password123")
        with pytest.raises(UnauthorizedError) as wrong:
            service.login("john@example.com", "wrongpass")

        assert unknown.value.code == wrong.value.code == "INVALID_CREDENTIALS"
        assert unknown.value.message == wrong.value.message

    @pytest.mark.parametrize("email,password,code", [
        ("", "password123", "MISSING_EMAIL"),
        (None, "password123", "MISSING_EMAIL"),
        ("john@", "password123", "INVALID_EMAIL"),
        ("john@example.com", "", "MISSING_PASSWORD"),
        ("john@example.com", None, "MISSING_PASSWORD"),
    ])
    def test_rejects_bad_input(self, service, registered, email, password, code):
        with pytest.raises(ValidationError) as exc_info:
            service.login(email, password)
        assert exc_info.value.code == code


class TestAuthenticate:

    def test_round_trip(self, service, registered):
        token = service.login("john@example.com", "password123").token
        principal = service.authenticate(token)
        assert principal.id == registered.id
        assert principal.email == "john@example.com"
        assert principal.is_admin is False

    def test_missing_token(self, service):
        with pytest.raises(UnauthorizedError) as exc_info:
            service.authenticate("")
        assert exc_info.value.code == "NO_TOKEN"

    def test_garbage_token(self, service):
        with pytest.raises(UnauthorizedError) as exc_info:
            service.authenticate("not.a.token")
        assert exc_info.value.code == "INVALID_TOKEN"
