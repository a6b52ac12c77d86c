from fastapi import APIRouter, Depends
from pymongo.database import Database

from database import (
    create_document,
    delete_document,
    get_documents,
    get_db,
    parse_object_id,
    serialize,
    serialize_all,
    update_document,
)
from errors import handle_errors
from schemas import IndustryCardCreate, IndustryCardUpdate
from uploads import UploadStore, get_upload_store

router = APIRouter(prefix="/api/industries", tags=["industries"])

COLLECTION = "industrycard"
NOT_FOUND = "Industry not found"


@router.get("")
def list_industries(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch industries"):
        return {"data": serialize_all(get_documents(db, COLLECTION))}


@router.post("", status_code=201)
def create_industry(item: IndustryCardCreate, db: Database = Depends(get_db),
                    uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to create industry"):
        item.image = uploads.store_image(item.image)
        doc = create_document(db, COLLECTION, item)
        return {"message": "Industry created", "data": serialize(doc)}


@router.put("/{industry_id}")
def update_industry(industry_id: str, item: IndustryCardUpdate, db: Database = Depends(get_db),
                    uploads: UploadStore = Depends(get_upload_store)):
    oid = parse_object_id(industry_id, NOT_FOUND)
    changes = item.model_dump(exclude_unset=True, exclude_none=True)
    with handle_errors("Failed to update industry"):
        if "image" in changes:
            changes["image"] = uploads.store_image(changes["image"])
        doc = update_document(db, COLLECTION, oid, changes, NOT_FOUND)
        return {"message": "Industry updated", "data": serialize(doc)}


@router.delete("/{industry_id}")
def delete_industry(industry_id: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to delete industry"):
        delete_document(db, COLLECTION, industry_id, NOT_FOUND)
        return {"message": "Industry deleted", "id": industry_id}
