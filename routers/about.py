"""The about-us document: company story, mission, values and people. At most one exists."""
from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_db, now, serialize, upsert_singleton
from errors import handle_errors
from schemas import AboutPage
from uploads import UploadStore, get_upload_store

router = APIRouter(prefix="/api/about", tags=["about"])

COLLECTION = "aboutpage"
SINGLETON_ID = "about"
NOT_FOUND = "About us data not found"
ALREADY_EXISTS = "About data already exists. Use PUT to update."


def load_about(db: Database):
    return db[COLLECTION].find_one({}, sort=[("updated_at", -1)])


def _with_stored_images(item: AboutPage, uploads: UploadStore) -> dict:
    doc = item.model_dump()
    for member in doc["team"]:
        member["image"] = uploads.store_image(member["image"]) or ""
    return doc


@router.get("")
def get_about(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch about us data"):
        doc = load_about(db)
        if doc is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        return {"data": serialize(doc)}


@router.post("", status_code=201)
def create_about(item: AboutPage, db: Database = Depends(get_db),
                 uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to create about us data"):
        if db[COLLECTION].find_one({}, {"_id": 1}) is not None:
            raise HTTPException(status_code=400, detail=ALREADY_EXISTS)
        try:
            doc = create_document(db, COLLECTION, dict(_with_stored_images(item, uploads), _id=SINGLETON_ID))
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail=ALREADY_EXISTS)
        return {"data": serialize(doc)}


@router.put("")
def save_about(item: AboutPage, db: Database = Depends(get_db),
               uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to update about us data"):
        stamp = now()
        doc = upsert_singleton(db, COLLECTION, SINGLETON_ID, {
            "$set": dict(_with_stored_images(item, uploads), updated_at=stamp),
            "$setOnInsert": {"created_at": stamp},
        })
        return {"data": serialize(doc)}


@router.delete("")
def delete_about(db: Database = Depends(get_db)):
    with handle_errors("Failed to delete about us data"):
        if db[COLLECTION].find_one_and_delete({}) is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        return {"message": "About us data deleted successfully"}
