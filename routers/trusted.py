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
from schemas import TrustedCompanyCreate, TrustedCompanyUpdate
from uploads import UploadStore, get_upload_store

router = APIRouter(prefix="/api/trusted-companies", tags=["trusted-companies"])

COLLECTION = "trustedcompany"
NOT_FOUND = "Trusted company not found"


@router.get("")
def list_trusted_companies(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch trusted companies"):
        return serialize_all(get_documents(db, COLLECTION))


@router.post("", status_code=201)
def create_trusted_company(item: TrustedCompanyCreate, db: Database = Depends(get_db),
                           uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to add trusted company"):
        item.image = uploads.store_image(item.image)
        return serialize(create_document(db, COLLECTION, item))


@router.patch("/{company_id}")
def update_trusted_company(company_id: str, item: TrustedCompanyUpdate, db: Database = Depends(get_db),
                           uploads: UploadStore = Depends(get_upload_store)):
    changes = item.model_dump(exclude_unset=True, exclude_none=True)
    with handle_errors("Failed to update trusted company"):
        existing = get_document(db, COLLECTION, company_id, NOT_FOUND)
        if "image" in changes:
            changes["image"] = uploads.store_image(changes["image"])
        updated = update_document(db, COLLECTION, existing["_id"], changes, NOT_FOUND)
        if "image" in changes and changes["image"] != existing.get("image"):
            uploads.remove(existing.get("image"))
        return serialize(updated)


@router.delete("/{company_id}")
def delete_trusted_company(company_id: str, db: Database = Depends(get_db),
                           uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to delete trusted company"):
        deleted = delete_document(db, COLLECTION, company_id, NOT_FOUND)
        uploads.remove(deleted.get("image"))
        return {"message": "Trusted company deleted", "id": company_id}
