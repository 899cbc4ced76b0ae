"""Centralized MongoDB index definitions and ensure step.

Call ensure_indexes(db) once on startup to create/update indexes safely.

Query patterns covered:
- users: login by email; fetch by _id; ensure unique email
- sweets: case-insensitive unique name (duplicate check), listing
  sorted by name, category filter and price range search

Indexes are created idempotently. Failures (for example existing duplicates
that violate a unique constraint) are logged and startup continues.
"""

from __future__ import annotations

import logging
from typing import Any
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, OperationFailure

logger = logging.getLogger(__name__)

# strength 2: compare ignoring case
CASE_INSENSITIVE = {"locale": "en", "strength": 2}


def _safe_create_index(col, keys, *, name: str | None = None, unique: bool = False, collation: dict | None = None) -> None:
    """Create index without sending null options to Mongo.

    Build kwargs dynamically and only include options when provided.
    """
    try:
        kwargs: dict[str, Any] = {}
        if name is not None:
            kwargs["name"] = name
        if unique:
            kwargs["unique"] = True
        if collation is not None:
            kwargs["collation"] = collation
        col.create_index(keys, **kwargs)
    except DuplicateKeyError:
        # Likely existing duplicate data prevents unique index creation.
        logger.warning("DuplicateKeyError creating index %s on %s. Skipping unique creation.", name or keys, col.name)
    except OperationFailure as e:
        logger.warning("OperationFailure creating index %s on %s: %s", name or keys, col.name, e)


def ensure_indexes(db: Any) -> None:
    """Create indexes across all collections used by the app.

    Safe to run multiple times.
    """

    # users
    users = db.users
    _safe_create_index(users, [("email", ASCENDING)], name="uniq_email", unique=True)

    # sweets
    sweets = db.sweets
    _safe_create_index(sweets, [("name", ASCENDING)], name="uniq_name_ci", unique=True, collation=CASE_INSENSITIVE)
    _safe_create_index(sweets, [("category", ASCENDING), ("price", ASCENDING)], name="category_price")
    _safe_create_index(sweets, [("price", ASCENDING)], name="price_asc")

    logger.info("Index ensure complete.")
