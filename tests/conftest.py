"""Pytest configuration and shared fixtures."""
from unittest.mock import create_autospec

import pytest
from flask_bcrypt import Bcrypt

from config import TestingConfig
from core.security import PasswordHasher, TokenManager
from repositories.sweet_repo import SweetRepository
from repositories.user_repo import UserRepository
from schemas.sweet import SweetRecord
from fakes import InMemorySweetRepository, InMemoryUserRepository


@pytest.fixture
def existing_sweet():
    """Sweet the mocked repository hands back by default."""
    return SweetRecord(id="sweet-123", name="Gulab Jamun", category="Indian", price=25, quantity=100)


@pytest.fixture
def sweet_repo(existing_sweet):
    """Autospec'd repository so tests can assert which calls were (not) made."""
    repo = create_autospec(SweetRepository, instance=True)
    repo.find_by_id.return_value = existing_sweet
    repo.find_by_name.return_value = None
    repo.update_quantity.side_effect = lambda sweet_id, quantity: existing_sweet.model_copy(update={'quantity': quantity})
    repo.delete.return_value = True
    return repo


@pytest.fixture
def user_repo():
    return create_autospec(UserRepository, instance=True)


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(Bcrypt(), rounds=4)


@pytest.fixture
def tokens():
    return TokenManager(TestingConfig.JWT_SECRET)


@pytest.fixture
def memory_sweets():
    return InMemorySweetRepository()


@pytest.fixture
def memory_users():
    return InMemoryUserRepository()


@pytest.fixture
def app(memory_sweets, memory_users):
    from app import create_app
    return create_app(TestingConfig, sweet_repo=memory_sweets, user_repo=memory_users)


@pytest.fixture
def client(app):
    return app.test_client()


def _register_and_login(client, name, email, password):
    client.post('/api/auth/register', json={'name': name, 'email': email, 'password': password})
    res = client.post('/api/auth/login', json={'email': email, 'password': password})
    return res.get_json()['data']['token']


@pytest.fixture
def user_headers(client):
    token = _register_and_login(client, 'Test User', 'sweetuser@test.com', 'password123')
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(client, memory_users):
    from schemas.user import Role
    client.post('/api/auth/register', json={'name': 'Test Admin', 'email': 'sweetadmin@test.com', 'password': 'adminpass123'})
    memory_users.set_role('sweetadmin@test.com', Role.ADMIN)
    res = client.post('/api/auth/login', json={'email': 'sweetadmin@test.com', 'password': 'adminpass123'})
    return {'Authorization': f"Bearer {res.get_json()['data']['token']}"}
