"""Pydantic models for the Sweet catalog.

Input payloads are checked by ``utils.validators`` (which produces the
per-rule error codes); the models here carry already-valid values between
the service, the repository and the route layer.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator

from utils.timezone_utils import ensure_utc


class SweetCreate(BaseModel):
    """Validated, trimmed fields for a new sweet."""
    name: str
    category: str
    price: float
    quantity: int


class SweetSearch(BaseModel):
    """Sanitized search filter. Absent fields do not constrain the result.

    name / category: case-insensitive substring match.
    min_price / max_price: inclusive bounds.
    """
    name: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class SweetRecord(BaseModel):
    """Canonical sweet representation returned by the repository."""
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    category: str
    price: float
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {'extra': 'ignore', 'populate_by_name': True}

    @field_validator('id', mode='before')
    @classmethod
    def _id_to_str(cls, v):
        return str(v) if v is not None else v

    @field_validator('created_at', 'updated_at')
    @classmethod
    def _utc(cls, v):
        return ensure_utc(v)


class SweetResult(BaseModel):
    sweet: SweetRecord


class SweetList(BaseModel):
    sweets: list[SweetRecord]
    total: int


class SweetSearchResult(BaseModel):
    sweets: list[SweetRecord]
    count: int


class DeletedSweet(BaseModel):
    id: str
    name: str


class DeleteResult(BaseModel):
    success: bool = True
    message: str
    deleted: DeletedSweet


class PurchaseResult(BaseModel):
    sweet: SweetRecord
    purchased: int
    remaining: int


class RestockResult(BaseModel):
    sweet: SweetRecord
    added: int
    previous_quantity: int = Field(serialization_alias="previousQuantity")
    new_quantity: int = Field(serialization_alias="newQuantity")

    model_config = {'populate_by_name': True}


__all__ = [
    "SweetCreate",
    "SweetSearch",
    "SweetRecord",
    "SweetResult",
    "SweetList",
    "SweetSearchResult",
    "DeletedSweet",
    "DeleteResult",
    "PurchaseResult",
    "RestockResult",
]
