from __future__ import annotations

import asyncio
import base64
import io
import os
from tempfile import TemporaryDirectory
from unittest import TestCase
from unittest.mock import patch

from fastapi import HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from tests.support import PNG_BYTES, AppTestCase
from uploads import UploadStore


class UploadStoreTests(TestCase):
    def setUp(self) -> None:
        self.tmpdir = TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.store = UploadStore(os.path.join(self.tmpdir.name, "media"), "/uploads/")

    def test_data_url_is_written_under_prefix(self) -> None:
        path = self.store.save_data_url("data:image/png;base64," + base64.b64encode(PNG_BYTES).decode())
        self.assertTrue(path.startswith("/uploads/"))
        self.assertTrue(path.endswith("-image.png"))
        stored = self.store.path_for(path.rsplit("/", 1)[1])
        with open(stored, "rb") as f:
            self.assertEqual(f.read(), PNG_BYTES)

    def test_non_data_values_pass_through(self) -> None:
        self.assertEqual(self.store.store_image("https://cdn.example.com/a.png"), "https://cdn.example.com/a.png")
        self.assertEqual(self.store.store_image("/uploads/existing.png"), "/uploads/existing.png")
        self.assertIsNone(self.store.store_image(None))

    def test_malformed_data_url_is_a_400(self) -> None:
        with self.assertRaises(HTTPException) as ctx:
            self.store.store_image("data:nonsense")
        self.assertEqual(ctx.exception.status_code, 400)

    def test_remove_ignores_external_and_traversal_paths(self) -> None:
        self.assertFalse(self.store.remove("https://cdn.example.com/a.png"))
        self.assertFalse(self.store.remove("/uploads/../secrets.txt"))
        self.assertFalse(self.store.remove("/uploads/missing.png"))
        self.assertIsNone(self.store.path_for("../etc/passwd"))

    def test_remove_deletes_local_file(self) -> None:
        path = self.store.save_data_url("data:image/png;base64," + base64.b64encode(PNG_BYTES).decode())
        self.assertTrue(self.store.remove(path))
        self.assertEqual(os.listdir(self.store.upload_dir), [])

    def test_concurrent_saves_write_in_thread_pool(self) -> None:
        uploads = [UploadFile(file=io.BytesIO(PNG_BYTES), filename=f"photo{i}.png") for i in range(2)]

        async def save_all():
            return await asyncio.gather(*(self.store.save(f) for f in uploads))

        with patch("uploads.run_in_threadpool", wraps=run_in_threadpool) as pool:
            paths = asyncio.run(save_all())

        self.assertEqual(pool.call_count, 2)
        self.assertEqual(sorted(p.rsplit("-", 1)[1] for p in paths), ["photo0.png", "photo1.png"])
        self.assertEqual(len(os.listdir(self.store.upload_dir)), 2)


class MediaRouteTests(AppTestCase):
    def test_upload_then_download(self) -> None:
        self.login()
        resp = self.client.post("/api/uploads", files={"file": ("logo final.png", PNG_BYTES, "image/png")})
        self.assertEqual(resp.status_code, 201, resp.text)
        url = resp.json()["url"]
        self.assertTrue(url.endswith("-logo_final.png"))

        fetched = self.client.get(url)
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.content, PNG_BYTES)

    def test_upload_requires_admin(self) -> None:
        resp = self.client.post("/api/uploads", files={"file": ("a.png", PNG_BYTES, "image/png")})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(self.stored_uploads(), [])

    def test_missing_file_is_404(self) -> None:
        self.assertEqual(self.client.get("/uploads/nothing.png").status_code, 404)
