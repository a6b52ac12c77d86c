from __future__ import annotations

from unittest import TestCase
from unittest.mock import patch

import mongomock
from pymongo import ASCENDING

import slugs
from slugs import backfill_slugs, insert_with_unique_slug, next_free_slug, slugify


class SlugifyTests(TestCase):
    def test_punctuation_and_case_are_dropped(self) -> None:
        self.assertEqual(slugify("Hello, World!"), "hello-world")

    def test_trailing_punctuation_leaves_no_trailing_hyphen(self) -> None:
        self.assertEqual(slugify("What's new ?"), "whats-new")

    def test_whitespace_and_hyphen_runs_collapse(self) -> None:
        self.assertEqual(slugify("  Tax   season -- 2024  "), "tax-season-2024")

    def test_is_idempotent(self) -> None:
        for title in ("Hello, World!", "A  B--C", "Ünïcode & more", ""):
            once = slugify(title)
            self.assertEqual(slugify(once), once)

    def test_non_ascii_only_title_is_empty(self) -> None:
        self.assertEqual(slugify("¿¡"), "")


class UniqueSlugTests(TestCase):
    def setUp(self) -> None:
        self.coll = mongomock.MongoClient().db.blogpost
        self.coll.create_index([("slug", ASCENDING)], unique=True, sparse=True)

    def test_identical_titles_get_numbered_suffixes(self) -> None:
        created = [insert_with_unique_slug(self.coll, {"title": "Year End"}, "Year End") for _ in range(3)]
        self.assertEqual([d["slug"] for d in created], ["year-end", "year-end-1", "year-end-2"])

    def test_empty_title_falls_back_to_untitled(self) -> None:
        self.assertEqual(next_free_slug(self.coll, "!!!"), "untitled")

    def test_own_document_is_ignored_when_regenerating(self) -> None:
        doc = insert_with_unique_slug(self.coll, {"title": "Payroll"}, "Payroll")
        self.assertEqual(next_free_slug(self.coll, "Payroll", exclude_id=doc["_id"]), "payroll")

    def test_lost_race_is_retried_with_a_new_candidate(self) -> None:
        self.coll.insert_one({"title": "Audit", "slug": "audit"})
        real_taken = slugs._slug_taken
        calls = {"n": 0}

        def stale_lookup(collection, slug, exclude_id=None):
            # The first lookup misses the existing row, as if another writer got there first
            calls["n"] += 1
            if calls["n"] == 1:
                return False
            return real_taken(collection, slug, exclude_id)

        with patch.object(slugs, "_slug_taken", side_effect=stale_lookup):
            doc = insert_with_unique_slug(self.coll, {"title": "Audit"}, "Audit")

        self.assertEqual(doc["slug"], "audit-1")
        self.assertEqual(self.coll.count_documents({"slug": "audit"}), 1)

    def test_backfill_only_touches_documents_without_slug(self) -> None:
        self.coll.drop_indexes()
        self.coll.insert_many([
            {"title": "First Post"},
            {"title": "First Post", "slug": None},
            {"title": "Second", "slug": ""},
            {"title": "Kept", "slug": "kept-slug"},
        ])

        updated = backfill_slugs(self.coll)

        self.assertEqual(sorted(u["slug"] for u in updated), ["first-post", "first-post-1", "second"])
        self.assertEqual(self.coll.find_one({"title": "Kept"})["slug"], "kept-slug")
        self.assertEqual(backfill_slugs(self.coll), [])
