from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from database import now
from security import create_access_token, decode_access_token
from tests.support import ADMIN_PASSWORD, ADMIN_USERNAME, AppTestCase


class LoginTests(AppTestCase):
    def test_login_sets_cookie_and_status_reports_authenticated(self) -> None:
        self.create_admin()
        resp = self.client.post("/api/auth", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        self.assertEqual(resp.status_code, 200)
        self.assertIn("admin-token", resp.cookies)
        self.assertIn("httponly", resp.headers["set-cookie"].lower())

        self.assertEqual(self.client.get("/api/auth").json(), {"authenticated": True})

    def test_wrong_password_is_401(self) -> None:
        self.create_admin()
        resp = self.client.post("/api/auth", json={"username": ADMIN_USERNAME, "password": "nope"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid username or password")

    def test_status_without_cookie(self) -> None:
        resp = self.client.get("/api/auth")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"authenticated": False})

    def test_logout_clears_cookie(self) -> None:
        self.login()
        self.assertEqual(self.client.delete("/api/auth").status_code, 200)
        self.assertEqual(self.client.get("/api/auth").status_code, 401)

    def test_expired_or_foreign_tokens_are_rejected(self) -> None:
        expired = create_access_token({"sub": "admin", "role": "admin"}, self.settings, timedelta(minutes=-1))
        self.assertIsNone(decode_access_token(expired, self.settings))

        not_admin = create_access_token({"sub": "someone", "role": "viewer"}, self.settings)
        self.assertIsNone(decode_access_token(not_admin, self.settings))

        other = self.settings.model_copy(update={"jwt_secret": "other-secret"})
        forged = create_access_token({"sub": "admin", "role": "admin"}, other)
        self.assertIsNone(decode_access_token(forged, self.settings))


class PasswordResetTests(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.create_admin()

    def request_token(self) -> str:
        resp = self.client.post("/api/auth/reset-password", json={"username": ADMIN_USERNAME})
        self.assertEqual(resp.status_code, 200)
        return self.db.admin.find_one({"username": ADMIN_USERNAME})["reset_token"]

    def test_unknown_user_gets_same_response(self) -> None:
        known = self.client.post("/api/auth/reset-password", json={"username": ADMIN_USERNAME}).json()
        unknown = self.client.post("/api/auth/reset-password", json={"username": "ghost"}).json()
        self.assertEqual(known["message"], unknown["message"])
        self.assertEqual(known["reset_url"], "")

    def test_reset_url_is_returned_only_when_enabled(self) -> None:
        self.app.state.settings = self.settings.model_copy(update={"expose_reset_url": True})
        body = self.client.post("/api/auth/reset-password", json={"username": ADMIN_USERNAME}).json()
        token = self.db.admin.find_one({})["reset_token"]
        self.assertEqual(body["reset_url"], f"https://example.com/reset-password/{token}")

    def test_reset_with_valid_token_changes_password_once(self) -> None:
        token = self.request_token()
        resp = self.client.put("/api/auth/reset-password", json={"token": token, "new_password": "N3w!Password"})
        self.assertEqual(resp.status_code, 200, resp.text)

        login = self.client.post("/api/auth", json={"username": ADMIN_USERNAME, "password": "N3w!Password"})
        self.assertEqual(login.status_code, 200)

        reused = self.client.put("/api/auth/reset-password", json={"token": token, "new_password": "An0ther!Pass"})
        self.assertEqual(reused.status_code, 400)

    def test_weak_password_is_rejected(self) -> None:
        token = self.request_token()
        resp = self.client.put("/api/auth/reset-password", json={"token": token, "new_password": "password"})
        self.assertEqual(resp.status_code, 400)
        self.assertIsNotNone(self.db.admin.find_one({})["reset_token"])

    def test_expired_token_is_rejected(self) -> None:
        token = self.request_token()
        with patch("routers.auth.now", return_value=now() + timedelta(hours=2)):
            resp = self.client.put("/api/auth/reset-password", json={"token": token, "new_password": "N3w!Password"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Invalid or expired reset token")


class AdminSettingsTests(AppTestCase):
    def test_first_admin_can_be_created_once(self) -> None:
        payload = {"username": "owner", "password": "S3cret!pw", "email": "owner@example.com"}
        created = self.client.post("/api/admin/settings", json=payload)
        self.assertEqual(created.status_code, 201, created.text)
        self.assertNotIn("password", created.json()["admin"])
        self.assertEqual(self.client.post("/api/admin/settings", json=payload).status_code, 400)

    def test_settings_are_private(self) -> None:
        self.create_admin()
        self.assertEqual(self.client.get("/api/admin/settings").status_code, 401)
        self.login()
        body = self.client.get("/api/admin/settings").json()
        self.assertEqual(body["username"], ADMIN_USERNAME)
        self.assertNotIn("password", body)

    def test_password_change_requires_current_password(self) -> None:
        self.login()
        missing = self.client.put("/api/admin/settings", json={"new_password": "N3w!Password"})
        self.assertEqual(missing.status_code, 400)
        wrong = self.client.put("/api/admin/settings", json={"new_password": "N3w!Password",
                                                             "current_password": "wrong"})
        self.assertEqual(wrong.status_code, 401)

        ok = self.client.put("/api/admin/settings", json={"new_password": "N3w!Password",
                                                          "current_password": ADMIN_PASSWORD})
        self.assertEqual(ok.status_code, 200, ok.text)

    def test_username_change_reissues_cookie(self) -> None:
        self.login()
        resp = self.client.put("/api/admin/settings", json={"username": "renamed"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertIn("admin-token", resp.cookies)
        token = resp.cookies["admin-token"]
        self.assertEqual(decode_access_token(token, self.settings)["sub"], "renamed")
