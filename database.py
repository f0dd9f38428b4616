"""
Database helpers

MongoDB access for the API. The connection is configured from the
environment:
- DATABASE_URL  -> MongoDB connection string
- DATABASE_NAME -> database name (defaults to "pesantren")

When DATABASE_URL is not set `db` stays None and routes that need the
store answer 503.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "pesantren")

client: Optional[MongoClient] = None
db: Optional[Database] = None

if DATABASE_URL:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]


def get_db() -> Database:
    """FastAPI dependency returning the active database."""
    if db is None:
        raise HTTPException(status_code=503, detail="Database not available")
    return db


def get_db_provider() -> Callable[[], Database]:
    """Dependency for handlers that only reach the store on some paths."""
    return get_db


def _utcnow():
    return datetime.now(timezone.utc)


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document, stamping created_at/updated_at. Returns the new id."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    now = _utcnow()
    data_dict["created_at"] = now
    data_dict["updated_at"] = now
    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def update_document(database: Database, collection_name: str, filter_dict: dict, updates: dict) -> int:
    updates = dict(updates)
    updates["updated_at"] = _utcnow()
    result = database[collection_name].update_one(filter_dict, {"$set": updates})
    return result.matched_count


def ensure_indexes(database: Database):
    """Create the indexes the collections rely on. Safe to call repeatedly."""
    for name in ("news", "blog", "event", "gallery", "donation_campaign"):
        database[name].create_index("slug", unique=True)
        database[name].create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    database["donation"].create_index("receipt_number", unique=True)
    database["donation"].create_index([("campaign", ASCENDING), ("payment_status", ASCENDING)])
    database["testimonial"].create_index([("status", ASCENDING), ("featured", DESCENDING), ("created_at", DESCENDING)])
    database["contact"].create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    database["admin_user"].create_index("email", unique=True)
    logger.info("Indexes ensured on %s", database.name)
