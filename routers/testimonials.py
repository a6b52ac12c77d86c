import logging

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
from schemas import TestimonialCreate, TestimonialUpdate
from uploads import UploadStore, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/testimonials", tags=["testimonials"])

COLLECTION = "testimonial"
NOT_FOUND = "Testimonial not found"


@router.get("")
def list_testimonials(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch testimonials"):
        return serialize_all(get_documents(db, COLLECTION))


@router.post("", status_code=201)
def create_testimonial(item: TestimonialCreate, db: Database = Depends(get_db),
                       uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to create testimonial"):
        item.image = uploads.store_image(item.image) or ""
        item.title = item.title or ""
        return serialize(create_document(db, COLLECTION, item))


@router.patch("/{testimonial_id}")
def update_testimonial(testimonial_id: str, item: TestimonialUpdate, db: Database = Depends(get_db),
                       uploads: UploadStore = Depends(get_upload_store)):
    changes = item.model_dump(exclude_unset=True, exclude_none=True)
    with handle_errors("Failed to update testimonial"):
        existing = get_document(db, COLLECTION, testimonial_id, NOT_FOUND)
        old_image = existing.get("image")
        if "image" in changes:
            changes["image"] = uploads.store_image(changes["image"])
        updated = update_document(db, COLLECTION, existing["_id"], changes, NOT_FOUND)
        if "image" in changes and changes["image"] != old_image:
            uploads.remove(old_image)
        return serialize(updated)


@router.delete("/{testimonial_id}")
def delete_testimonial(testimonial_id: str, db: Database = Depends(get_db),
                       uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to delete testimonial"):
        deleted = delete_document(db, COLLECTION, testimonial_id, NOT_FOUND)
        uploads.remove(deleted.get("image"))
        return {"message": "Testimonial deleted", "id": testimonial_id}
