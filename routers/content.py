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
from schemas import ContentBlockCreate, ContentBlockUpdate
from uploads import UploadStore, get_upload_store

router = APIRouter(prefix="/api/content", tags=["content"])

COLLECTION = "contentblock"
NOT_FOUND = "Content block not found"


@router.get("")
def list_content_blocks(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch content"):
        return serialize_all(get_documents(db, COLLECTION))


@router.post("", status_code=201)
def create_content_block(item: ContentBlockCreate, db: Database = Depends(get_db),
                         uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to create content"):
        item.image = uploads.store_image(item.image)
        return serialize(create_document(db, COLLECTION, item))


@router.patch("/{block_id}")
def update_content_block(block_id: str, item: ContentBlockUpdate, db: Database = Depends(get_db),
                         uploads: UploadStore = Depends(get_upload_store)):
    oid = parse_object_id(block_id, NOT_FOUND)
    changes = item.model_dump(exclude_unset=True, exclude_none=True)
    with handle_errors("Failed to update content"):
        if "image" in changes:
            changes["image"] = uploads.store_image(changes["image"])
        return {"message": "Content updated", "data": serialize(update_document(db, COLLECTION, oid, changes, NOT_FOUND))}


@router.delete("/{block_id}")
def delete_content_block(block_id: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to delete content"):
        delete_document(db, COLLECTION, block_id, NOT_FOUND)
        return {"message": "Content deleted", "id": block_id}
