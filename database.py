"""
Database helpers

A single pymongo client/database handle shared by the whole process, plus the
small helpers every route module uses to insert, fetch and serialize
documents. Routes never import `db` directly: they ask for it through the
`get_db` dependency so it can be replaced in tests.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database

from config import DATABASE_URL, DATABASE_NAME

logger = logging.getLogger("artfolio.database")

client: Optional[MongoClient] = None
db: Optional[Database] = None

try:
    # MongoClient connects lazily, so this never blocks startup
    client = MongoClient(DATABASE_URL, tz_aware=True)
    db = client[DATABASE_NAME]
except Exception as e:
    logger.error("Could not configure MongoDB client: %s", e)


def get_db() -> Database:
    if db is None:
        raise HTTPException(status_code=503, detail="Database not available")
    return db


def ensure_indexes(database: Database):
    """Unique indexes backing the account uniqueness checks."""
    database["user"].create_index("email", unique=True)
    database["user"].create_index("username", unique=True)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document stamped with created_at/updated_at and return its id."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    stamp = now_utc()
    data_dict["created_at"] = stamp
    data_dict["updated_at"] = stamp
    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None,
                  limit: Optional[int] = None, sort: Optional[list] = None) -> List[dict]:
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def to_object_id(id_str: str, what: str = "") -> ObjectId:
    if not isinstance(id_str, str) or not ObjectId.is_valid(id_str):
        label = f"{what} id" if what else "id"
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return ObjectId(id_str)


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.pop("_id", None)
    if isinstance(_id, ObjectId):
        doc["id"] = str(_id)
    elif _id is not None:
        doc["id"] = _id
    # Convert ObjectId in nested fields if any
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
    doc.pop("password_hash", None)
    return doc
