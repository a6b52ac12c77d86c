"""
Team categories

Each category is a tab of cards. Create and update take multipart form data:
``tab_name``, ``cards`` (a JSON array) and optional ``images`` files, where
``image_indexes[i]`` names the card that ``images[i]`` belongs to. All uploads
are written concurrently before the category document is persisted.
"""
import asyncio
import json
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError
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
from errors import VALIDATION_MESSAGE, handle_errors
from schemas import TeamCategoryCreate
from uploads import UploadStore, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/team", tags=["team"])

COLLECTION = "teamcategory"
NOT_FOUND = "Category not found"


async def build_category(tab_name: str, cards: str, images: List[UploadFile], image_indexes: List[int],
                         uploads: UploadStore) -> TeamCategoryCreate:
    """Validate the form fields and attach the uploaded images to their cards."""
    try:
        raw_cards: List[Dict[str, Any]] = json.loads(cards or "[]")
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail=VALIDATION_MESSAGE)
    if not isinstance(raw_cards, list) or not all(isinstance(c, dict) for c in raw_cards):
        raise HTTPException(status_code=400, detail=VALIDATION_MESSAGE)
    if len(images) != len(image_indexes) or any(i < 0 or i >= len(raw_cards) for i in image_indexes):
        raise HTTPException(status_code=400, detail="Each image needs a matching card index")
    if len(set(image_indexes)) != len(image_indexes):
        raise HTTPException(status_code=400, detail="Each card takes at most one image")

    # Cards receiving an upload are checked with a stand-in image so nothing is written for a bad form
    targets = set(image_indexes)
    try:
        TeamCategoryCreate(
            tab_name=tab_name,
            cards=[dict(c, image="pending-upload") if i in targets else c for i, c in enumerate(raw_cards)],
        )
    except ValidationError:
        raise HTTPException(status_code=400, detail=VALIDATION_MESSAGE)

    paths = await asyncio.gather(*(uploads.save(f) for f in images))
    for index, path in zip(image_indexes, paths):
        raw_cards[index]["image"] = path

    try:
        return TeamCategoryCreate(tab_name=tab_name, cards=raw_cards)
    except ValidationError:
        raise HTTPException(status_code=400, detail=VALIDATION_MESSAGE)


@router.get("")
def list_team_categories(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch data"):
        return {"success": True, "data": serialize_all(get_documents(db, COLLECTION, newest_first=False))}


@router.post("", status_code=201)
async def create_team_category(
    tab_name: str = Form(""),
    cards: str = Form("[]"),
    images: List[UploadFile] = File(default=[]),
    image_indexes: List[int] = Form(default=[]),
    db: Database = Depends(get_db),
    uploads: UploadStore = Depends(get_upload_store),
):
    with handle_errors("Failed to create category"):
        category = await build_category(tab_name, cards, images, image_indexes, uploads)
        doc = create_document(db, COLLECTION, category)
        logger.info("Created team category %s with %d cards", category.tab_name, len(category.cards))
        return {"success": True, "data": serialize(doc)}


@router.put("/{category_id}")
async def update_team_category(
    category_id: str,
    tab_name: str = Form(""),
    cards: str = Form("[]"),
    images: List[UploadFile] = File(default=[]),
    image_indexes: List[int] = Form(default=[]),
    db: Database = Depends(get_db),
    uploads: UploadStore = Depends(get_upload_store),
):
    oid = parse_object_id(category_id, NOT_FOUND)
    with handle_errors("Failed to update category"):
        if db[COLLECTION].find_one({"_id": oid}, {"_id": 1}) is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        category = await build_category(tab_name, cards, images, image_indexes, uploads)
        doc = update_document(db, COLLECTION, oid, category.model_dump(), NOT_FOUND)
        return {"success": True, "data": serialize(doc)}


@router.delete("/{category_id}")
def delete_team_category(category_id: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to delete category"):
        delete_document(db, COLLECTION, category_id, NOT_FOUND)
        return {"success": True, "message": "Category deleted", "id": category_id}
