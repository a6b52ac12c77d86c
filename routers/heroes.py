"""
Hero sections for the home, blog and about pages

Heroes are posted as multipart forms so the background image can be uploaded
in the same request. The newest hero for a page is the one rendered.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
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
from errors import VALIDATION_MESSAGE, handle_errors
from schemas import HeroPage
from uploads import UploadStore, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/heroes", tags=["heroes"])

COLLECTION = "herosection"
NOT_FOUND = "Hero not found"


def latest_hero(db: Database, page: HeroPage):
    docs = get_documents(db, COLLECTION, {"page": page.value}, limit=1)
    return docs[0] if docs else None


@router.get("/{page}")
def get_hero(page: HeroPage, db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch hero"):
        doc = latest_hero(db, page)
        if doc is None:
            raise HTTPException(status_code=404, detail="No hero found")
        return serialize(doc)


@router.get("/{page}/all")
def list_heroes(page: HeroPage, db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch hero data"):
        return serialize_all(get_documents(db, COLLECTION, {"page": page.value}))


@router.post("/{page}", status_code=201)
async def create_hero(
    page: HeroPage,
    title: str = Form(""),
    description: str = Form(""),
    button_text: str = Form(""),
    image: Optional[UploadFile] = File(None),
    db: Database = Depends(get_db),
    uploads: UploadStore = Depends(get_upload_store),
):
    if not title.strip() or not description.strip():
        raise HTTPException(status_code=400, detail=VALIDATION_MESSAGE)
    with handle_errors("Failed to create hero"):
        image_path = await uploads.save(image) if image is not None and image.filename else ""
        doc = create_document(db, COLLECTION, {
            "page": page.value,
            "title": title,
            "description": description,
            "button_text": button_text,
            "image": image_path,
        })
        logger.info("Created %s hero", page.value)
        return serialize(doc)


@router.patch("/{page}/{hero_id}")
async def update_hero(
    page: HeroPage,
    hero_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    button_text: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Database = Depends(get_db),
    uploads: UploadStore = Depends(get_upload_store),
):
    with handle_errors("Failed to update hero"):
        existing = get_document(db, COLLECTION, hero_id, NOT_FOUND)
        if existing.get("page") != page.value:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        changes = {}
        if title:
            changes["title"] = title
        if description:
            changes["description"] = description
        if button_text is not None:
            changes["button_text"] = button_text
        if image is not None and image.filename:
            changes["image"] = await uploads.save(image)
        updated = update_document(db, COLLECTION, existing["_id"], changes, NOT_FOUND)
        if "image" in changes:
            uploads.remove(existing.get("image"))
        return serialize(updated)


@router.delete("/{page}/{hero_id}")
def delete_hero(page: HeroPage, hero_id: str, db: Database = Depends(get_db),
                uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to delete hero"):
        if get_document(db, COLLECTION, hero_id, NOT_FOUND).get("page") != page.value:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        deleted = delete_document(db, COLLECTION, hero_id, NOT_FOUND)
        uploads.remove(deleted.get("image"))
        return {"message": "Hero deleted", "id": hero_id}
