"""Mongo persistence for user accounts."""
from __future__ import annotations

from bson import ObjectId
from pymongo import ReturnDocument

from schemas.user import Role, UserCredentials, UserRecord
from utils.timezone_utils import now_utc

# Everything except the hash
_PUBLIC_PROJECTION = {'password': 0}


class UserRepository:
    """Thin Mongo access layer for the users collection.

    Emails are stored trimmed and lowercased; lookups expect the caller to
    pass an already normalized address.
    """

    def __init__(self, db):
        self._col = db.users

    def find_by_email(self, email: str) -> UserRecord | None:
        doc = self._col.find_one({'email': email}, _PUBLIC_PROJECTION)
        return UserRecord.model_validate(doc) if doc else None

    def find_by_email_with_password(self, email: str) -> UserCredentials | None:
        doc = self._col.find_one({'email': email})
        if not doc or not doc.get('password'):
            return None
        return UserCredentials.model_validate(doc)

    def find_by_id(self, user_id: str) -> UserRecord | None:
        if not ObjectId.is_valid(user_id):
            return None
        doc = self._col.find_one({'_id': ObjectId(user_id)}, _PUBLIC_PROJECTION)
        return UserRecord.model_validate(doc) if doc else None

    def create(self, name: str, email: str, password_hash: str, role: Role = Role.USER) -> UserRecord:
        doc = {
            'name': name.strip(),
            'email': email.strip().lower(),
            'password': password_hash,
            'role': role.value,
            'created_at': now_utc(),
        }
        doc['_id'] = self._col.insert_one(doc).inserted_id
        doc.pop('password')
        return UserRecord.model_validate(doc)

    def set_role(self, email: str, role: Role) -> UserRecord | None:
        doc = self._col.find_one_and_update(
            {'email': email},
            {'$set': {'role': role.value}},
            projection=_PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return UserRecord.model_validate(doc) if doc else None


__all__ = ["UserRepository"]
