from __future__ import annotations

import base64

from tests.support import PNG_BYTES, AppTestCase

DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


class IndustryApiTests(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login()

    def test_missing_field_is_400_and_nothing_persisted(self) -> None:
        resp = self.client.post("/api/industries", json={"title": "Healthcare", "description": "Clinics"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["fields"], ["image"])
        self.assertEqual(self.db.industrycard.count_documents({}), 0)

    def test_malformed_json_is_a_static_500(self) -> None:
        resp = self.client.post(
            "/api/industries", content=b"{not json", headers={"content-type": "application/json"},
        )
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"detail": "Failed to process request"})
        self.assertEqual(self.db.industrycard.count_documents({}), 0)

    def test_crud(self) -> None:
        created = self.client.post("/api/industries", json={
            "title": "Healthcare", "description": "Clinics", "image": "https://cdn.example.com/h.png",
            "tags": ["Medical"],
        })
        self.assertEqual(created.status_code, 201, created.text)
        industry = created.json()["data"]

        updated = self.client.put(f"/api/industries/{industry['id']}", json={"description": "Clinics and labs"})
        self.assertEqual(updated.json()["data"]["description"], "Clinics and labs")
        self.assertEqual(updated.json()["data"]["title"], "Healthcare")

        self.assertEqual(len(self.client.get("/api/industries").json()["data"]), 1)
        self.assertEqual(self.client.delete(f"/api/industries/{industry['id']}").status_code, 200)

    def test_delete_unknown_id_is_404(self) -> None:
        resp = self.client.delete("/api/industries/000000000000000000000000")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Industry not found")


class TestimonialApiTests(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login()

    def test_optional_fields_default_to_empty(self) -> None:
        created = self.client.post("/api/testimonials", json={"name": "Jennifer M.", "quote": "Great team."}).json()
        self.assertEqual(created["title"], "")
        self.assertEqual(created["image"], "")

    def test_replacing_image_removes_previous_upload(self) -> None:
        created = self.client.post("/api/testimonials", json={
            "name": "Robert K.", "quote": "Always on time.", "image": DATA_URL,
        }).json()
        first_upload = self.stored_uploads()
        self.assertEqual(len(first_upload), 1)

        updated = self.client.patch(f"/api/testimonials/{created['id']}", json={"image": DATA_URL}).json()
        self.assertNotEqual(updated["image"], created["image"])
        remaining = self.stored_uploads()
        self.assertEqual(len(remaining), 1)
        self.assertNotEqual(remaining, first_upload)

    def test_delete_removes_image(self) -> None:
        created = self.client.post("/api/testimonials", json={
            "name": "Robert K.", "quote": "Always on time.", "image": DATA_URL,
        }).json()
        self.assertEqual(self.client.delete(f"/api/testimonials/{created['id']}").status_code, 200)
        self.assertEqual(self.stored_uploads(), [])


class TrustedCompanyApiTests(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login()

    def test_crud_with_uploaded_logo(self) -> None:
        created = self.client.post("/api/trusted-companies", json={"name": "Xero", "image": DATA_URL})
        self.assertEqual(created.status_code, 201, created.text)
        company = created.json()
        self.assertTrue(company["image"].startswith("/uploads/"))

        renamed = self.client.patch(f"/api/trusted-companies/{company['id']}", json={"name": "Xero Ltd"}).json()
        self.assertEqual(renamed["name"], "Xero Ltd")
        self.assertEqual(renamed["image"], company["image"])

        self.assertEqual(self.client.delete(f"/api/trusted-companies/{company['id']}").status_code, 200)
        self.assertEqual(self.stored_uploads(), [])
        self.assertEqual(self.client.get("/api/trusted-companies").json(), [])

    def test_logo_is_required(self) -> None:
        resp = self.client.post("/api/trusted-companies", json={"name": "Xero"})
        self.assertEqual(resp.status_code, 400)


class ContentBlockApiTests(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login()

    def test_crud(self) -> None:
        created = self.client.post("/api/content", json={
            "title": "Onboarding", "description": "Three steps", "image": "https://cdn.example.com/o.png",
        })
        self.assertEqual(created.status_code, 201, created.text)
        block = created.json()

        updated = self.client.patch(f"/api/content/{block['id']}", json={"title": "Getting started"})
        self.assertEqual(updated.json()["data"]["title"], "Getting started")

        self.assertEqual(len(self.client.get("/api/content").json()), 1)
        self.assertEqual(self.client.delete(f"/api/content/{block['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/content/{block['id']}").status_code, 404)
