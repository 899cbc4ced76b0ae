"""Startup / shutdown helpers shared by the dev server and gunicorn.

- run_local_startup(db): per-process startup (ensure indexes, warm the pool).
- run_master_global_warmup(mongo_uri): once in the gunicorn master before
  workers fork; uses a short-lived client so no sockets cross the fork.
- close_client(client): teardown for the shared MongoClient.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from utils.db_indexes import ensure_indexes

logger = logging.getLogger(__name__)


def _warmup_db(db: Any) -> None:
    # Touch the collections to open pooled connections
    for col in (db.users, db.sweets):
        col.find_one({}, {"_id": 1})


def run_local_startup(db: Any, *, create_indexes: bool = True) -> None:
    """Full startup for a single process (dev server or container worker)."""
    try:
        _warmup_db(db)
        if create_indexes:
            ensure_indexes(db)
    except PyMongoError as e:
        # The app still starts; requests will surface the DB error
        logger.error("Startup DB tasks failed: %s", e)


def run_master_global_warmup(mongo_uri: Optional[str] = None) -> None:
    """Ensure indexes once from the gunicorn master process."""
    if not mongo_uri:
        return
    client = MongoClient(mongo_uri)
    try:
        db = client.get_default_database(default='sweet_shop')
        ensure_indexes(db)
    except PyMongoError as e:
        logger.error("[gunicorn-startup] Failed to run master DB tasks: %s", e)
    finally:
        client.close()


def close_client(client: Any) -> None:
    if client is None:
        return
    try:
        client.close()
        logger.info("MongoDB client closed")
    except PyMongoError as e:
        logger.warning("Error closing MongoDB client: %s", e)
