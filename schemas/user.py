"""Pydantic models & enums for the account domain."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator

from utils.timezone_utils import ensure_utc


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Exact, case-sensitive lookup. ``"Admin"``, ``" admin "``, ``""`` and None are not roles."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        return cls._value2member_map_.get(value)  # type: ignore[return-value]


def is_admin(role: Any) -> bool:
    return Role.parse(role) is Role.ADMIN


def _stringify_id(v):
    return str(v) if v is not None else v


class UserRecord(BaseModel):
    """Public view of an account. Never carries the password hash."""
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    email: str
    role: Role = Role.USER
    created_at: Optional[datetime] = None

    model_config = {'extra': 'ignore', 'populate_by_name': True}

    @field_validator('id', mode='before')
    @classmethod
    def _id_to_str(cls, v):
        return _stringify_id(v)

    @field_validator('role', mode='before')
    @classmethod
    def _known_role(cls, v):
        # Documents written before roles existed default to a plain user
        return Role.parse(v) or Role.USER

    @field_validator('created_at')
    @classmethod
    def _utc(cls, v):
        return ensure_utc(v)


class UserCredentials(UserRecord):
    """Account including its bcrypt hash; only used for login comparison."""
    password_hash: str = Field(validation_alias=AliasChoices("password_hash", "password"))

    def public(self) -> UserRecord:
        return UserRecord.model_validate(self.model_dump(exclude={'password_hash'}))


class Principal(BaseModel):
    """Caller identity reconstructed from a verified token."""
    id: str
    email: str
    role: Optional[Role] = None

    @field_validator('role', mode='before')
    @classmethod
    def _parse_role(cls, v):
        return Role.parse(v)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class RegisterResult(BaseModel):
    user: UserRecord


class LoginResult(BaseModel):
    user: UserRecord
    token: str
    is_admin: bool = Field(serialization_alias="isAdmin")

    model_config = {'populate_by_name': True}


__all__ = [
    "Role",
    "is_admin",
    "UserRecord",
    "UserCredentials",
    "Principal",
    "RegisterResult",
    "LoginResult",
]
