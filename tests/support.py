"""Shared test scaffolding: an app wired to an in-memory Mongo and a temp upload dir."""
from __future__ import annotations

import sys
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

import mongomock
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from database import create_document, ensure_indexes
from main import create_app
from schemas import Admin
from security import get_password_hash
from settings import Settings

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "Str0ng!Pass"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-body"


class AppTestCase(TestCase):
    """Fresh app, database and upload directory per test."""

    def setUp(self) -> None:
        self.tmpdir = TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.upload_dir = Path(self.tmpdir.name) / "uploads"

        self.settings = Settings(
            _env_file=None,
            database_url=None,
            jwt_secret="test-secret",
            upload_dir=str(self.upload_dir),
            site_url="https://example.com",
        )
        self.db = mongomock.MongoClient().db
        ensure_indexes(self.db)
        self.app = create_app(self.settings, database=self.db)
        self.client = TestClient(self.app)

    def create_admin(self, username: str = ADMIN_USERNAME, password: str = ADMIN_PASSWORD) -> dict:
        return create_document(self.db, "admin", Admin(
            username=username, email=f"{username}@example.com", password=get_password_hash(password),
        ))

    def login(self) -> None:
        """Create the admin (if needed) and keep its cookie on ``self.client``."""
        if self.db["admin"].find_one({"username": ADMIN_USERNAME}) is None:
            self.create_admin()
        resp = self.client.post("/api/auth", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        self.assertEqual(resp.status_code, 200, resp.text)

    def stored_uploads(self) -> list:
        if not self.upload_dir.exists():
            return []
        return sorted(p.name for p in self.upload_dir.iterdir())
