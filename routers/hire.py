"""Hire listings: professionals offered for hire, shown on the /hire page."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo.database import Database

from database import (
    create_document,
    delete_document,
    get_document,
    get_documents,
    get_db,
    serialize,
    serialize_all,
    update_document,
)
from errors import handle_errors
from schemas import HireListingCreate, HireListingUpdate
from uploads import UploadStore, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hire", tags=["hire"])

COLLECTION = "hirelisting"
NOT_FOUND = "Hire listing not found"


@router.get("")
def list_hire_listings(published: Optional[bool] = None, db: Database = Depends(get_db)):
    flt = {"published": published} if published is not None else {}
    with handle_errors("Failed to fetch hire listings"):
        return serialize_all(get_documents(db, COLLECTION, flt))


@router.post("", status_code=201)
def create_hire_listing(item: HireListingCreate, db: Database = Depends(get_db),
                        uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to create hire listing"):
        item.image = uploads.store_image(item.image) or ""
        doc = create_document(db, COLLECTION, item)
        logger.info("Created hire listing %s", item.title)
        return serialize(doc)


@router.patch("/{listing_id}")
def update_hire_listing(listing_id: str, item: HireListingUpdate, db: Database = Depends(get_db),
                        uploads: UploadStore = Depends(get_upload_store)):
    changes = item.model_dump(exclude_unset=True, exclude_none=True)
    with handle_errors("Failed to update hire listing"):
        existing = get_document(db, COLLECTION, listing_id, NOT_FOUND)
        old_image = existing.get("image")
        if "image" in changes:
            changes["image"] = uploads.store_image(changes["image"]) or ""
        updated = update_document(db, COLLECTION, existing["_id"], changes, NOT_FOUND)
        if "image" in changes and changes["image"] != old_image:
            uploads.remove(old_image)
        return serialize(updated)


@router.delete("/{listing_id}")
def delete_hire_listing(listing_id: str, db: Database = Depends(get_db),
                        uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to delete hire listing"):
        deleted = delete_document(db, COLLECTION, listing_id, NOT_FOUND)
        uploads.remove(deleted.get("image"))
        return {"message": "Hire listing deleted", "id": listing_id}
