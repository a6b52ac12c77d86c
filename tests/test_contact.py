from __future__ import annotations

from tests.support import AppTestCase

SUBMISSION = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone": "+1 555 0100",
    "company_name": "Analytical Engines",
    "message": "We need help with bookkeeping.",
}


class ContactApiTests(AppTestCase):
    def test_public_submission_starts_as_new(self) -> None:
        resp = self.client.post("/api/contact", json=SUBMISSION)
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["data"]["status"], "new")

    def test_invalid_email_is_rejected(self) -> None:
        resp = self.client.post("/api/contact", json=dict(SUBMISSION, email="not-an-email"))
        self.assertEqual(resp.status_code, 400)
        self.assertIn("email", resp.json()["fields"])
        self.assertEqual(self.db.contactsubmission.count_documents({}), 0)

    def test_listing_requires_admin(self) -> None:
        self.client.post("/api/contact", json=SUBMISSION)
        self.assertEqual(self.client.get("/api/contact").status_code, 401)

        self.login()
        body = self.client.get("/api/contact").json()
        self.assertEqual(body["count"], 1)
        self.assertEqual(body["data"][0]["email"], "ada@example.com")

    def test_status_update_is_visible_in_listing(self) -> None:
        created = self.client.post("/api/contact", json=SUBMISSION).json()["data"]
        self.login()

        resp = self.client.patch(f"/api/contact/{created['id']}", json={"status": "resolved"})
        self.assertEqual(resp.status_code, 200, resp.text)

        listed = self.client.get("/api/contact").json()["data"]
        self.assertEqual(listed[0]["status"], "resolved")

    def test_unknown_status_is_rejected(self) -> None:
        created = self.client.post("/api/contact", json=SUBMISSION).json()["data"]
        self.login()
        resp = self.client.patch(f"/api/contact/{created['id']}", json={"status": "archived"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.db.contactsubmission.find_one({})["status"], "new")

    def test_delete(self) -> None:
        created = self.client.post("/api/contact", json=SUBMISSION).json()["data"]
        self.login()
        self.assertEqual(self.client.delete(f"/api/contact/{created['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/contact/{created['id']}").status_code, 404)
