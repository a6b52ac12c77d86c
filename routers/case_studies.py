import logging

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
from schemas import CardImageReplace, CaseStudyCreate, CaseStudyUpdate
from slugs import backfill_slugs, insert_with_unique_slug, slugify, update_with_unique_slug
from uploads import UploadStore, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/case-studies", tags=["case-studies"])

COLLECTION = "casestudy"
NOT_FOUND = "Case study not found"


def find_case_study(db: Database, slug: str):
    """Look a case study up by slug, falling back to its (slugified) title."""
    coll = db[COLLECTION]
    doc = coll.find_one({"slug": slug}) or coll.find_one({"title": slug})
    if doc is None:
        wanted = slugify(slug)
        doc = coll.find_one({"slug": wanted})
        if doc is None:
            doc = next((d for d in coll.find({}) if slugify(d.get("title", "")) == wanted), None)
    return doc


@router.get("")
def list_case_studies(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch case studies"):
        return serialize_all(get_documents(db, COLLECTION))


@router.get("/{slug}")
def get_case_study(slug: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch case study"):
        doc = find_case_study(db, slug)
        if doc is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        return serialize(doc)


@router.post("", status_code=201)
def create_case_study(item: CaseStudyCreate, db: Database = Depends(get_db),
                      uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to create case study"):
        doc = item.model_dump()
        for card in doc["cards"]:
            card["image"] = uploads.store_image(card["image"])
        doc["created_at"] = doc["updated_at"] = now()
        insert_with_unique_slug(db[COLLECTION], doc, item.title)
        logger.info("Created case study %s", doc["slug"])
        return serialize(doc)


@router.patch("/{case_id}")
def update_case_study(case_id: str, item: CaseStudyUpdate, db: Database = Depends(get_db),
                      uploads: UploadStore = Depends(get_upload_store)):
    changes = item.model_dump(exclude_unset=True, exclude_none=True)
    with handle_errors("Failed to update case study"):
        existing = get_document(db, COLLECTION, case_id, NOT_FOUND)
        for card in changes.get("cards", []):
            card["image"] = uploads.store_image(card["image"])
        if "title" in changes and changes["title"] != existing.get("title"):
            changes["updated_at"] = now()
            updated = update_with_unique_slug(db[COLLECTION], existing["_id"], changes, changes["title"])
            if updated is None:
                raise HTTPException(status_code=404, detail=NOT_FOUND)
        else:
            updated = update_document(db, COLLECTION, existing["_id"], changes, NOT_FOUND)
        return serialize(updated)


@router.post("/{case_id}/cards/{card_index}/image")
def replace_card_image(case_id: str, card_index: int, item: CardImageReplace, db: Database = Depends(get_db),
                       uploads: UploadStore = Depends(get_upload_store)):
    """Point one card at a new image and delete the card's previous local upload."""
    with handle_errors("Failed to replace image"):
        existing = get_document(db, COLLECTION, case_id, NOT_FOUND)
        cards = existing.get("cards") or []
        if card_index < 0 or card_index >= len(cards):
            raise HTTPException(status_code=400, detail="Invalid card index")
        old_image = cards[card_index].get("image")
        new_image = uploads.store_image(item.image_url)
        updated = update_document(db, COLLECTION, existing["_id"], {f"cards.{card_index}.image": new_image}, NOT_FOUND)
        if old_image != new_image:
            uploads.remove(old_image)
        return {"message": "Image replaced", "data": serialize(updated)}


@router.delete("/{case_id}")
def delete_case_study(case_id: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to delete case study"):
        deleted = delete_document(db, COLLECTION, case_id, NOT_FOUND)
        logger.info("Deleted case study %s", deleted.get("slug"))
        return {"message": "Case study deleted", "id": case_id}


@router.post("/migrate")
def migrate_case_study_slugs(db: Database = Depends(get_db)):
    with handle_errors("Failed to migrate case studies"):
        updated = backfill_slugs(db[COLLECTION])
        if not updated:
            return {"message": "All case studies already have slugs", "updated": 0}
        return {"message": "Added slugs to case studies", "updated": len(updated), "case_studies": updated}
