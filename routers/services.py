"""
Services

Services are grouped into categories and published at ``/services/<slug>``.
The slug is derived from the hero title and kept unique by the same index
and retry logic as blog posts. ``category_id`` is stored as the string id of
a ``servicecategory`` document and is checked on every write.
"""
import logging
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from database import (
    create_document,
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
from schemas import ServiceCategoryCreate, ServiceCreate, ServiceUpdate
from slugs import insert_with_unique_slug, update_with_unique_slug
from uploads import UploadStore, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/services", tags=["services"])

COLLECTION = "service"
CATEGORY_COLLECTION = "servicecategory"
NOT_FOUND = "Service not found"
CATEGORY_NOT_FOUND = "Category not found"


def check_category(db: Database, category_id: str) -> None:
    if not ObjectId.is_valid(category_id):
        raise HTTPException(status_code=400, detail=f"Invalid category id: {category_id}")
    if db[CATEGORY_COLLECTION].find_one({"_id": ObjectId(category_id)}, {"_id": 1}) is None:
        raise HTTPException(status_code=400, detail="Unknown category")


def services_by_category(db: Database) -> list:
    """``[{"category": ..., "services": [...]}]`` for every category that has services."""
    services = serialize_all(get_documents(db, COLLECTION, newest_first=False))
    groups = []
    for category in serialize_all(get_documents(db, CATEGORY_COLLECTION, newest_first=False)):
        members = [s for s in services if s.get("category_id") == category["id"]]
        if members:
            groups.append({"category": category, "services": members})
    return groups


# ---------------------- Categories ----------------------
@router.get("/categories")
def list_categories(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch categories"):
        return serialize_all(get_documents(db, CATEGORY_COLLECTION))


@router.post("/categories", status_code=201)
def create_category(item: ServiceCategoryCreate, db: Database = Depends(get_db)):
    with handle_errors("Failed to create category"):
        doc = create_document(db, CATEGORY_COLLECTION, item)
        logger.info("Created service category %s", item.name)
        return {"data": serialize(doc)}


@router.delete("/categories/{category_id}")
def delete_category(category_id: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to delete category"):
        get_document(db, CATEGORY_COLLECTION, category_id, CATEGORY_NOT_FOUND)
        if db[COLLECTION].find_one({"category_id": category_id}, {"_id": 1}) is not None:
            raise HTTPException(status_code=400, detail="Category still has services")
        delete_document(db, CATEGORY_COLLECTION, category_id, CATEGORY_NOT_FOUND)
        return {"message": "Category deleted", "id": category_id}


# ---------------------- Services ----------------------
@router.get("")
def list_services(category_id: Optional[str] = None, db: Database = Depends(get_db)):
    flt = {}
    if category_id:
        if not ObjectId.is_valid(category_id):
            raise HTTPException(status_code=400, detail=f"Invalid category id: {category_id}")
        flt["category_id"] = category_id
    with handle_errors("Failed to fetch services"):
        return {"data": serialize_all(get_documents(db, COLLECTION, flt))}


@router.get("/{slug}")
def get_service(slug: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch service"):
        doc = db[COLLECTION].find_one({"slug": slug})
        if doc is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        return {"data": serialize(doc)}


@router.post("", status_code=201)
def create_service(item: ServiceCreate, db: Database = Depends(get_db),
                   uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to create service"):
        check_category(db, item.category_id)
        doc = item.model_dump()
        doc["hero_section"]["image"] = uploads.store_image(doc["hero_section"]["image"]) or ""
        doc["created_at"] = doc["updated_at"] = now()
        insert_with_unique_slug(db[COLLECTION], doc, item.hero_section.title)
        logger.info("Created service %s", doc["slug"])
        return {"data": serialize(doc)}


@router.patch("/{service_id}")
def update_service(service_id: str, item: ServiceUpdate, db: Database = Depends(get_db),
                   uploads: UploadStore = Depends(get_upload_store)):
    changes = item.model_dump(exclude_unset=True, exclude_none=True)
    with handle_errors("Failed to update service"):
        existing = get_document(db, COLLECTION, service_id, NOT_FOUND)
        if "category_id" in changes:
            check_category(db, changes["category_id"])
        old_image = (existing.get("hero_section") or {}).get("image")
        hero = changes.get("hero_section")
        if hero is not None:
            hero["image"] = uploads.store_image(hero["image"]) or ""
        old_title = (existing.get("hero_section") or {}).get("title")
        if hero is not None and hero["title"] != old_title:
            changes["updated_at"] = now()
            updated = update_with_unique_slug(db[COLLECTION], existing["_id"], changes, hero["title"])
            if updated is None:
                raise HTTPException(status_code=404, detail=NOT_FOUND)
        else:
            updated = update_document(db, COLLECTION, existing["_id"], changes, NOT_FOUND)
        if hero is not None and hero["image"] != old_image:
            uploads.remove(old_image)
        return {"message": "Service updated successfully", "data": serialize(updated)}


@router.delete("/{service_id}")
def delete_service(service_id: str, db: Database = Depends(get_db),
                   uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to delete service"):
        deleted = delete_document(db, COLLECTION, service_id, NOT_FOUND)
        uploads.remove((deleted.get("hero_section") or {}).get("image"))
        logger.info("Deleted service %s", deleted.get("slug"))
        return {"message": "Service deleted successfully", "id": service_id}
