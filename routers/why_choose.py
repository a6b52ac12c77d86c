"""The "Why choose us" section: at most one document, updated in place."""
from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_db, now, serialize, upsert_singleton
from errors import handle_errors
from schemas import WhyChooseUs

router = APIRouter(prefix="/api/why-choose", tags=["why-choose"])

COLLECTION = "whychooseus"
SINGLETON_ID = "why-choose"
ALREADY_EXISTS = "Why Choose Us already exists. Use PUT to update."


def load_why_choose(db: Database):
    return db[COLLECTION].find_one({}, sort=[("updated_at", -1)])


@router.get("")
def get_why_choose(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch Why Choose Us"):
        return {"data": serialize(load_why_choose(db))}


@router.post("", status_code=201)
def create_why_choose(item: WhyChooseUs, db: Database = Depends(get_db)):
    with handle_errors("Failed to create Why Choose Us"):
        if db[COLLECTION].find_one({}, {"_id": 1}) is not None:
            raise HTTPException(status_code=400, detail=ALREADY_EXISTS)
        try:
            doc = create_document(db, COLLECTION, dict(item.model_dump(), _id=SINGLETON_ID))
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail=ALREADY_EXISTS)
        return {"data": serialize(doc)}


@router.put("")
def save_why_choose(item: WhyChooseUs, db: Database = Depends(get_db)):
    with handle_errors("Failed to update Why Choose Us"):
        stamp = now()
        doc = upsert_singleton(db, COLLECTION, SINGLETON_ID, {
            "$set": dict(item.model_dump(), updated_at=stamp),
            "$setOnInsert": {"created_at": stamp},
        })
        return {"data": serialize(doc)}


@router.delete("")
def delete_why_choose(db: Database = Depends(get_db)):
    with handle_errors("Failed to delete Why Choose Us"):
        deleted = db[COLLECTION].find_one_and_delete({})
        return {"message": "Deleted" if deleted else "No document to delete"}
