"""Footer settings: a singleton document managed by find-or-create."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_db, now, serialize, upsert_singleton
from errors import handle_errors
from schemas import FooterSettings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/footer", tags=["footer"])

COLLECTION = "footersettings"
SINGLETON_ID = "footer"
ALREADY_EXISTS = "Settings already exist. Use PUT to update."


def load_footer(db: Database) -> dict:
    """Return the footer document, creating the default one on first use."""
    doc = db[COLLECTION].find_one({}, sort=[("updated_at", -1)])
    if doc is not None:
        return doc
    stamp = now()
    doc = upsert_singleton(db, COLLECTION, SINGLETON_ID, {
        "$setOnInsert": dict(FooterSettings().model_dump(), created_at=stamp, updated_at=stamp),
    })
    logger.info("Ensured default footer settings")
    return doc


@router.get("")
def get_footer(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch footer settings"):
        return {"data": serialize(load_footer(db))}


@router.post("", status_code=201)
def create_footer(item: FooterSettings, db: Database = Depends(get_db)):
    with handle_errors("Failed to create footer settings"):
        if db[COLLECTION].find_one({}, {"_id": 1}) is not None:
            raise HTTPException(status_code=400, detail=ALREADY_EXISTS)
        try:
            doc = create_document(db, COLLECTION, dict(item.model_dump(), _id=SINGLETON_ID))
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail=ALREADY_EXISTS)
        return {"data": serialize(doc)}


@router.put("")
def save_footer(item: FooterSettings, db: Database = Depends(get_db)):
    with handle_errors("Failed to update footer settings"):
        stamp = now()
        doc = upsert_singleton(db, COLLECTION, SINGLETON_ID, {
            "$set": dict(item.model_dump(), updated_at=stamp),
            "$setOnInsert": {"created_at": stamp},
        })
        return {"data": serialize(doc)}
