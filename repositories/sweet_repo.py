"""Mongo persistence for the sweets collection."""
from __future__ import annotations

import re
from typing import Any
from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument

from schemas.sweet import SweetCreate, SweetRecord, SweetSearch
from utils.db_indexes import CASE_INSENSITIVE
from utils.timezone_utils import now_utc


def _oid(sweet_id: str) -> ObjectId | None:
    # Malformed ids behave like missing documents
    if isinstance(sweet_id, ObjectId):
        return sweet_id
    if not isinstance(sweet_id, str) or not ObjectId.is_valid(sweet_id):
        return None
    return ObjectId(sweet_id)


def _record(doc: dict | None) -> SweetRecord | None:
    return SweetRecord.model_validate(doc) if doc else None


class SweetRepository:
    """Thin Mongo access layer for the sweets collection."""

    def __init__(self, db):
        self._col = db.sweets

    # ---- Read ----
    def find_by_name(self, name: str) -> SweetRecord | None:
        """Case-insensitive exact match (served by the name_ci index)."""
        return _record(self._col.find_one({'name': name}, collation=CASE_INSENSITIVE))

    def find_by_id(self, sweet_id: str) -> SweetRecord | None:
        oid = _oid(sweet_id)
        if oid is None:
            return None
        return _record(self._col.find_one({'_id': oid}))

    def find_all(self) -> list[SweetRecord]:
        return [SweetRecord.model_validate(d) for d in self._col.find({}).sort([('name', ASCENDING)])]

    def search(self, query: SweetSearch) -> list[SweetRecord]:
        if query.is_empty():
            return self.find_all()
        mongo_filter: dict[str, Any] = {}
        if query.name:
            mongo_filter['name'] = {'$regex': re.escape(query.name), '$options': 'i'}
        if query.category:
            mongo_filter['category'] = {'$regex': re.escape(query.category), '$options': 'i'}
        price: dict[str, float] = {}
        if query.min_price is not None:
            price['$gte'] = query.min_price
        if query.max_price is not None:
            price['$lte'] = query.max_price
        if price:
            mongo_filter['price'] = price
        return [SweetRecord.model_validate(d) for d in self._col.find(mongo_filter).sort([('name', ASCENDING)])]

    # ---- Create ----
    def create(self, fields: SweetCreate) -> SweetRecord:
        now = now_utc()
        doc = {**fields.model_dump(), 'created_at': now, 'updated_at': now}
        doc['_id'] = self._col.insert_one(doc).inserted_id
        return SweetRecord.model_validate(doc)

    # ---- Update ----
    def update(self, sweet_id: str, fields: dict[str, Any]) -> SweetRecord | None:
        oid = _oid(sweet_id)
        if oid is None:
            return None
        doc = self._col.find_one_and_update(
            {'_id': oid},
            {'$set': {**fields, 'updated_at': now_utc()}},
            return_document=ReturnDocument.AFTER,
        )
        return _record(doc)

    def update_quantity(self, sweet_id: str, quantity: int) -> SweetRecord | None:
        return self.update(sweet_id, {'quantity': quantity})

    # ---- Delete ----
    def delete(self, sweet_id: str) -> bool:
        oid = _oid(sweet_id)
        if oid is None:
            return False
        res = self._col.delete_one({'_id': oid})
        return res.deleted_count == 1


__all__ = ["SweetRepository"]
