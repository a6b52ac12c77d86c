"""
Database helpers

The Mongo handle is created once by ``main.create_app`` and kept on
``app.state.db``. Handlers receive it through ``Depends(get_db)``, which lets
tests swap in a mongomock database.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from fastapi import HTTPException, Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, OperationFailure

logger = logging.getLogger(__name__)

# Collections whose documents carry a unique public slug, and the field it is derived from
SLUGGED_COLLECTIONS = {"blogpost": "title", "casestudy": "title", "service": "hero_section.title"}


def connect(database_url: Optional[str], database_name: str) -> Optional[Database]:
    """Open a client for ``database_url`` or return None when it is not configured."""
    if not database_url:
        logger.warning("DATABASE_URL is not set; database-backed routes will fail")
        return None
    client = MongoClient(database_url)
    logger.info("MongoDB client created for database %s", database_name)
    return client[database_name]


def ensure_indexes(db: Database) -> None:
    try:
        for name in SLUGGED_COLLECTIONS:
            db[name].create_index([("slug", ASCENDING)], unique=True, sparse=True)
        db["admin"].create_index([("username", ASCENDING)], unique=True)
    except OperationFailure:
        # Legacy rows with empty/duplicate slugs block the index until backfilled
        logger.exception("Could not create unique indexes; run scripts/migrate_slugs.py")


def get_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise HTTPException(status_code=500, detail="Database not available")
    return db


def now() -> datetime:
    return datetime.utcnow()


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    """Insert ``data`` with timestamps and return the stored document."""
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    stamp = now()
    doc.setdefault("created_at", stamp)
    doc["updated_at"] = stamp
    db[collection_name].insert_one(doc)
    return doc


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None, newest_first: bool = True) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    cursor = cursor.sort("created_at", -1 if newest_first else 1)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def parse_object_id(value: str, not_found: str = "Not found") -> ObjectId:
    """Turn a path id into an ObjectId; malformed ids cannot exist, so they are a 404."""
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=404, detail=not_found)
    return ObjectId(value)


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Replace ``_id`` with a string ``id`` so the document can be returned as JSON."""
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out


def serialize_all(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize(d) for d in docs]


def get_document(db: Database, collection_name: str, doc_id: str, not_found: str = "Not found") -> Dict[str, Any]:
    doc = db[collection_name].find_one({"_id": parse_object_id(doc_id, not_found)})
    if doc is None:
        raise HTTPException(status_code=404, detail=not_found)
    return doc


def update_document(db: Database, collection_name: str, doc_id: ObjectId, changes: Dict[str, Any],
                    not_found: str = "Not found") -> Dict[str, Any]:
    """``$set`` the given fields and return the updated document (404 if it is gone)."""
    changes = dict(changes, updated_at=now())
    doc = db[collection_name].find_one_and_update(
        {"_id": doc_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if doc is None:
        raise HTTPException(status_code=404, detail=not_found)
    return doc


def delete_document(db: Database, collection_name: str, doc_id: str, not_found: str = "Not found") -> Dict[str, Any]:
    doc = db[collection_name].find_one_and_delete({"_id": parse_object_id(doc_id, not_found)})
    if doc is None:
        raise HTTPException(status_code=404, detail=not_found)
    return doc


def upsert_singleton(db: Database, collection_name: str, key: str, update: Dict[str, Any]) -> Dict[str, Any]:
    """Apply ``update`` to the one document of a singleton collection, creating it if needed.

    A new singleton is stored under the fixed ``_id`` ``key``, so concurrent
    first writes collide on the primary key instead of inserting twice.
    """
    collection = db[collection_name]
    existing = collection.find_one({}, {"_id": 1}, sort=[("updated_at", -1)])
    target = {"_id": existing["_id"] if existing else key}
    try:
        return collection.find_one_and_update(target, update, upsert=True, return_document=ReturnDocument.AFTER)
    except DuplicateKeyError:
        logger.info("Singleton %s created concurrently, applying update to it", collection_name)
        return collection.find_one_and_update({"_id": key}, update, return_document=ReturnDocument.AFTER)
