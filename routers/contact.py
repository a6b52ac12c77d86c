import logging

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
from schemas import ContactStatus, ContactStatusUpdate, ContactSubmissionCreate
from security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["contact"])

COLLECTION = "contactsubmission"
NOT_FOUND = "Contact not found"


def submit_contact(item: ContactSubmissionCreate, db: Database) -> dict:
    doc = create_document(db, COLLECTION, dict(item.model_dump(), status=ContactStatus.new.value))
    logger.info("New contact submission from %s", item.email)
    return doc


@router.post("", status_code=201)
def create_contact_submission(item: ContactSubmissionCreate, db: Database = Depends(get_db)):
    with handle_errors("Failed to submit contact form"):
        doc = submit_contact(item, db)
        return {"message": "Contact form submitted successfully", "data": serialize(doc)}


@router.get("", dependencies=[Depends(require_admin)])
def list_contact_submissions(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch contacts"):
        docs = serialize_all(get_documents(db, COLLECTION))
        return {"data": docs, "count": len(docs)}


@router.patch("/{contact_id}")
def update_contact_status(contact_id: str, item: ContactStatusUpdate, db: Database = Depends(get_db)):
    oid = parse_object_id(contact_id, NOT_FOUND)
    with handle_errors("Failed to update contact"):
        doc = update_document(db, COLLECTION, oid, {"status": item.status.value}, NOT_FOUND)
        logger.info("Contact %s marked %s", contact_id, item.status.value)
        return {"message": "Contact status updated", "data": serialize(doc)}


@router.delete("/{contact_id}")
def delete_contact_submission(contact_id: str, db: Database = Depends(get_db)):
    with handle_errors("Failed to delete contact"):
        delete_document(db, COLLECTION, contact_id, NOT_FOUND)
        return {"message": "Contact deleted successfully", "id": contact_id}
