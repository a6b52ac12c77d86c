#!/usr/bin/env python3
"""Create the admin account, or reset its password.

Usage::

    python -m scripts.init_admin
    python -m scripts.init_admin --reset-password
"""
import argparse
import logging
import os
import sys

from dotenv import load_dotenv
from pymongo.errors import DuplicateKeyError

from database import connect, create_document, ensure_indexes, update_document
from settings import Settings, setup_logging
from schemas import Admin
from security import get_password_hash

logger = logging.getLogger("scripts.init_admin")

COLLECTION = "admin"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the site admin account.")
    parser.add_argument("--username", default=os.getenv("ADMIN_USERNAME", "admin"))
    parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD", "admin123"))
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL", "admin@example.com"))
    parser.add_argument(
        "--reset-password",
        action="store_true",
        default=os.getenv("ADMIN_RESET_PASSWORD", "false").lower() == "true",
        help="Overwrite the password of an existing admin",
    )
    return parser.parse_args()


def init_admin(db, username: str, password: str, email: str, reset_password: bool = False) -> str:
    """Returns what happened: ``created``, ``reset`` or ``skipped``."""
    existing = db[COLLECTION].find_one({"username": username})
    if existing is not None and not reset_password:
        logger.info("Admin %s already exists; pass --reset-password to change its password", username)
        return "skipped"
    if existing is not None:
        update_document(db, COLLECTION, existing["_id"], {
            "password": get_password_hash(password),
            "email": existing.get("email") or email,
        })
        logger.info("Password reset for admin %s", username)
        return "reset"
    try:
        create_document(db, COLLECTION, Admin(username=username, email=email, password=get_password_hash(password)))
    except DuplicateKeyError:
        logger.warning("Admin %s was created concurrently", username)
        return "skipped"
    logger.info("Admin %s created", username)
    return "created"


def main() -> int:
    load_dotenv()
    settings = Settings()
    setup_logging(settings.log_level)
    args = parse_args()
    db = connect(settings.database_url, settings.database_name)
    if db is None:
        logger.critical("DATABASE_URL is not set")
        return 1
    ensure_indexes(db)
    init_admin(db, args.username, args.password, args.email, args.reset_password)
    return 0


if __name__ == "__main__":
    sys.exit(main())
