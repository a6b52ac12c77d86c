"""
Slug generation

Blog posts, case studies and services are addressed publicly by a slug derived from
their title. Uniqueness is enforced by the unique ``slug`` index created in
``database.ensure_indexes``; the lookup below only picks a likely-free
candidate, and a lost race surfaces as a DuplicateKeyError which is retried
with a fresh lookup.
"""
import logging
import re
from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

MAX_SLUG_ATTEMPTS = 20
EMPTY_SLUG_BASE = "untitled"

_INVALID_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(title: str) -> str:
    """Lowercase ``title`` and reduce it to ``[a-z0-9-]`` with single hyphens."""
    slug = _INVALID_CHARS.sub("", (title or "").lower()).strip()
    slug = _WHITESPACE.sub("-", slug)
    return _HYPHENS.sub("-", slug)


def _slug_taken(collection: Collection, slug: str, exclude_id: Optional[ObjectId] = None) -> bool:
    query: Dict[str, Any] = {"slug": slug}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    return collection.find_one(query, {"_id": 1}) is not None


def next_free_slug(collection: Collection, title: str, exclude_id: Optional[ObjectId] = None) -> str:
    """Return ``base``, ``base-1``, ``base-2`` ... whichever is unused first."""
    base = slugify(title) or EMPTY_SLUG_BASE
    candidate = base
    counter = 1
    while _slug_taken(collection, candidate, exclude_id):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


def insert_with_unique_slug(collection: Collection, document: Dict[str, Any], title: str) -> Dict[str, Any]:
    """Insert ``document`` under the first free slug for ``title``."""
    for attempt in range(1, MAX_SLUG_ATTEMPTS + 1):
        document["slug"] = next_free_slug(collection, title)
        try:
            collection.insert_one(document)
            return document
        except DuplicateKeyError:
            document.pop("_id", None)
            logger.warning("Slug %r claimed concurrently (attempt %d), retrying", document["slug"], attempt)
    raise RuntimeError(f"Could not allocate a unique slug for {title!r}")


def update_with_unique_slug(collection: Collection, doc_id: ObjectId, changes: Dict[str, Any],
                            title: str) -> Optional[Dict[str, Any]]:
    """Apply ``changes`` plus a regenerated slug for ``title`` to one document."""
    for attempt in range(1, MAX_SLUG_ATTEMPTS + 1):
        changes["slug"] = next_free_slug(collection, title, exclude_id=doc_id)
        try:
            return collection.find_one_and_update(
                {"_id": doc_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            logger.warning("Slug %r claimed concurrently (attempt %d), retrying", changes["slug"], attempt)
    raise RuntimeError(f"Could not allocate a unique slug for {title!r}")


def _field(doc: Dict[str, Any], dotted: str) -> str:
    value: Any = doc
    for part in dotted.split("."):
        value = value.get(part) if isinstance(value, dict) else None
    return value if isinstance(value, str) else ""


def backfill_slugs(collection: Collection, title_field: str = "title") -> list:
    """Give every document lacking a slug one derived from its title.

    ``title_field`` may be dotted, e.g. ``hero_section.title`` for services.

    Returns ``[{"id", "title", "slug"}, ...]`` for the documents updated.
    """
    missing = list(collection.find({"$or": [{"slug": {"$exists": False}}, {"slug": None}, {"slug": ""}]}))
    updated = []
    for doc in missing:
        title = _field(doc, title_field)
        for attempt in range(1, MAX_SLUG_ATTEMPTS + 1):
            slug = next_free_slug(collection, title, exclude_id=doc["_id"])
            try:
                collection.update_one({"_id": doc["_id"]}, {"$set": {"slug": slug}})
                break
            except DuplicateKeyError:
                logger.warning("Slug %r claimed concurrently during backfill (attempt %d)", slug, attempt)
        else:
            raise RuntimeError(f"Could not allocate a unique slug for {title!r}")
        updated.append({"id": str(doc["_id"]), "title": title, "slug": slug})
    logger.info("Backfilled %d slugs in %s", len(updated), collection.name)
    return updated
