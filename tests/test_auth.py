"""Tests for the shared-password gate."""
from werkzeug.security import generate_password_hash

from tests.base import AppTestCase


class TestGateDisabled(AppTestCase):
    """No password configured: everything is open."""

    def test_api_and_pages_open(self) -> None:
        self.assertEqual(self.client.get("/api/events").status_code, 200)
        self.assertEqual(self.client.get("/timeline").status_code, 200)

    def test_status(self) -> None:
        self.assertEqual(self.client.get("/auth/status").get_json(),
                         {"authenticated": True, "required": False})


class TestGateEnabled(AppTestCase):
    """Plain shared password."""

    extra_config = {"TIMELINE_PASSWORD": "forever"}

    def test_api_requires_login(self) -> None:
        resp = self.client.get("/api/events")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json(), {"error": "Authentication required"})

        resp = self.client.post("/api/events", json={"date": "2025-05-10", "title": "x"})
        self.assertEqual(resp.status_code, 401)

    def test_pages_redirect_to_login(self) -> None:
        resp = self.client.get("/timeline")
        self.assertEqual(resp.status_code, 302)
        self.assertIn("/auth/login", resp.headers["Location"])

    def test_login_page_renders(self) -> None:
        resp = self.client.get("/auth/login")
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b'name="password"', resp.data)

    def test_wrong_password_json(self) -> None:
        resp = self.client.post("/auth/login", json={"password": "never"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(self.client.get("/api/events").status_code, 401)

    def test_missing_password_json(self) -> None:
        resp = self.client.post("/auth/login", json={})
        self.assertEqual(resp.status_code, 400)

    def test_json_login_opens_api(self) -> None:
        resp = self.client.post("/auth/login", json={"password": "forever"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"authenticated": True, "required": True})

        self.assertEqual(self.client.get("/api/events").status_code, 200)
        self.assertEqual(self.client.get("/auth/status").get_json(),
                         {"authenticated": True, "required": True})

    def test_form_login_redirects_to_next(self) -> None:
        resp = self.client.post("/auth/login?next=/timeline", data={"password": "forever"})
        self.assertEqual(resp.status_code, 302)
        self.assertTrue(resp.headers["Location"].endswith("/timeline"))

    def test_form_login_ignores_offsite_next(self) -> None:
        resp = self.client.post("/auth/login?next=//evil.example.com", data={"password": "forever"})
        self.assertTrue(resp.headers["Location"].endswith("/timeline"))

    def test_wrong_password_form(self) -> None:
        resp = self.client.post("/auth/login", data={"password": "nope"})
        self.assertEqual(resp.status_code, 401)
        self.assertIn(b"Wrong password.", resp.data)

    def test_logout_closes_api_again(self) -> None:
        self.client.post("/auth/login", json={"password": "forever"})
        resp = self.client.post("/auth/logout", json={})
        self.assertEqual(resp.get_json(), {"authenticated": False})
        self.assertEqual(self.client.get("/api/events").status_code, 401)

    def test_csrf_token_endpoint(self) -> None:
        token = self.client.get("/auth/csrf").get_json()["csrf_token"]
        self.assertTrue(token)


class TestGateWithHash(AppTestCase):
    """Hashed shared password."""

    extra_config = {"TIMELINE_PASSWORD_HASH": generate_password_hash("us-two")}

    def test_hash_login(self) -> None:
        self.assertEqual(self.client.post("/auth/login", json={"password": "nope"}).status_code, 401)
        self.assertEqual(self.client.post("/auth/login", json={"password": "us-two"}).status_code, 200)
        self.assertEqual(self.client.get("/api/events").status_code, 200)
