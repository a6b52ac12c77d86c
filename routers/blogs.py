import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from database import (
    delete_document,
    get_document,
    get_documents,
    get_db,
    now,
    serialize,
    serialize_all,
    update_document,
)
from errors import handle_errors
from schemas import BlogPostCreate, BlogPostUpdate
from slugs import backfill_slugs, insert_with_unique_slug, update_with_unique_slug
from uploads import UploadStore, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/blogs", tags=["blogs"])

COLLECTION = "blogpost"
NOT_FOUND = "Blog post not found"


@router.get("")
def list_blog_posts(published: Optional[bool] = None, limit: Optional[int] = None, db: Database = Depends(get_db)):
    flt = {"published": published} if published is not None else {}
    with handle_errors("Failed to fetch blog posts"):
        return serialize_all(get_documents(db, COLLECTION, flt, limit=limit))


@router.get("/{slug}")
def get_blog_post(slug: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch blog post"):
        doc = db[COLLECTION].find_one({"slug": slug})
        if doc is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        return serialize(doc)


@router.post("", status_code=201)
def create_blog_post(item: BlogPostCreate, db: Database = Depends(get_db),
                     uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to create blog post"):
        doc = item.model_dump()
        doc["image"] = uploads.store_image(doc["image"])
        doc["created_at"] = doc["updated_at"] = now()
        insert_with_unique_slug(db[COLLECTION], doc, item.title)
        logger.info("Created blog post %s", doc["slug"])
        return serialize(doc)


@router.patch("/{post_id}")
def update_blog_post(post_id: str, item: BlogPostUpdate, db: Database = Depends(get_db),
                     uploads: UploadStore = Depends(get_upload_store)):
    changes = item.model_dump(exclude_unset=True, exclude_none=True)
    with handle_errors("Failed to update blog post"):
        existing = get_document(db, COLLECTION, post_id, NOT_FOUND)
        if "image" in changes:
            changes["image"] = uploads.store_image(changes["image"])
        if "title" in changes and changes["title"] != existing.get("title"):
            changes["updated_at"] = now()
            updated = update_with_unique_slug(db[COLLECTION], existing["_id"], changes, changes["title"])
            if updated is None:
                raise HTTPException(status_code=404, detail=NOT_FOUND)
        else:
            updated = update_document(db, COLLECTION, existing["_id"], changes, NOT_FOUND)
        return serialize(updated)


@router.delete("/{post_id}")
def delete_blog_post(post_id: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to delete blog post"):
        deleted = delete_document(db, COLLECTION, post_id, NOT_FOUND)
        logger.info("Deleted blog post %s", deleted.get("slug"))
        return {"message": "Blog post deleted", "id": post_id}


@router.post("/migrate")
def migrate_blog_slugs(db: Database = Depends(get_db)):
    with handle_errors("Failed to migrate blog posts"):
        updated = backfill_slugs(db[COLLECTION])
        if not updated:
            return {"message": "All blog posts already have slugs", "updated": 0}
        return {"message": "Added slugs to blog posts", "updated": len(updated), "posts": updated}
