from __future__ import annotations

from unittest import TestCase
from unittest.mock import MagicMock

import mongomock
from bs4 import BeautifulSoup

from database import ensure_indexes
from scripts.api_client import ApiError
from scripts.import_archive import ArchiveReader
from scripts.init_admin import init_admin
from scripts.migrate_slugs import migrate
from scripts.seed_content import INDUSTRIES, SERVICES, TESTIMONIALS, TRUSTED_COMPANIES, seed, seed_services
from security import verify_password


class InitAdminTests(TestCase):
    def setUp(self) -> None:
        self.db = mongomock.MongoClient().db
        ensure_indexes(self.db)

    def test_creates_then_skips(self) -> None:
        self.assertEqual(init_admin(self.db, "admin", "Secret!1", "a@example.com"), "created")
        self.assertEqual(init_admin(self.db, "admin", "Other!22", "a@example.com"), "skipped")
        stored = self.db.admin.find_one({"username": "admin"})
        self.assertTrue(verify_password("Secret!1", stored["password"]))

    def test_reset_password_overwrites_hash(self) -> None:
        init_admin(self.db, "admin", "Secret!1", "a@example.com")
        self.assertEqual(init_admin(self.db, "admin", "Other!22", "b@example.com", reset_password=True), "reset")
        stored = self.db.admin.find_one({"username": "admin"})
        self.assertTrue(verify_password("Other!22", stored["password"]))
        self.assertEqual(stored["email"], "a@example.com")


class MigrateSlugsTests(TestCase):
    def test_reports_counts_per_collection(self) -> None:
        db = mongomock.MongoClient().db
        db.blogpost.insert_many([{"title": "One"}, {"title": "Two", "slug": "two"}])
        db.casestudy.insert_one({"title": "Case", "slug": ""})

        self.assertEqual(migrate(db), {"blogpost": 1, "casestudy": 1, "service": 0})
        self.assertEqual(db.casestudy.find_one({})["slug"], "case")


class SeedContentTests(TestCase):
    def test_counts_failures_without_stopping(self) -> None:
        client = MagicMock()
        client.send.side_effect = [{}] + [ApiError("boom")] + [{}] * 50

        counts = seed(client)

        total = 1 + len(TESTIMONIALS) + len(INDUSTRIES) + len(TRUSTED_COMPANIES)
        self.assertEqual(counts, {"created": total - 1, "failed": 1})
        self.assertEqual(client.send.call_args_list[0].args, ("PUT", "/api/why-choose"))

    def test_services_are_created_under_their_new_category(self) -> None:
        client = MagicMock()
        client.send.side_effect = [
            {"data": {"id": "cat-1"}}, {"data": {}},
            ApiError("category rejected"),
        ]

        counts = seed_services(client)

        self.assertEqual(len(SERVICES), 2)
        self.assertEqual(counts, {"created": 1, "failed": 1})
        method, path = client.send.call_args_list[1].args
        self.assertEqual((method, path), ("POST", "/api/services"))
        payload = client.send.call_args_list[1].kwargs["json"]
        self.assertEqual(payload["category_id"], "cat-1")
        self.assertNotIn("category", payload)


class ArchiveReaderTests(TestCase):
    HOME = """
    <html><body>
      <h1>Welcome to the Firm</h1><p>Accounting made simple.</p>
      <img src="/img/acme.png" alt="Acme logo">
      <img src="/img/acme.png" alt="Acme logo again">
      <img src="/img/banner.png" alt="banner">
      <section><h2>Industries we serve</h2>
        <div class="card"><h3>Healthcare</h3><p>Clinics</p><img src="/img/h.png"></div>
        <div class="card"><h3>No image</h3><p>Skipped</p></div>
      </section>
    </body></html>
    """

    def setUp(self) -> None:
        self.reader = ArchiveReader("https://archive.example.com/site/")
        self.addCleanup(self.reader.close)
        self.reader.soup = MagicMock(side_effect=self._soup)

    def _soup(self, path="/"):
        return BeautifulSoup(self.HOME, "html.parser")

    def test_hero(self) -> None:
        self.assertEqual(self.reader.hero(), {
            "title": "Welcome to the Firm",
            "description": "Accounting made simple.",
            "button_text": "Contact Us",
        })

    def test_trusted_logos_are_deduplicated_and_absolute(self) -> None:
        self.assertEqual(self.reader.trusted_companies(), [
            {"name": "Acme logo", "image": "https://archive.example.com/site/img/acme.png"},
        ])

    def test_industries_need_title_description_and_image(self) -> None:
        items = self.reader.industries()
        self.assertEqual([i["title"] for i in items], ["Healthcare"])
        self.assertEqual(items[0]["image"], "https://archive.example.com/site/img/h.png")
