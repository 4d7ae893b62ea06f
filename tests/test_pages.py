"""Tests for the rendered timeline pages."""
from tests.base import AppTestCase


class TestPages(AppTestCase):
    """Server-rendered views."""

    def test_root_redirects_to_timeline(self) -> None:
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 302)
        self.assertTrue(resp.headers["Location"].endswith("/timeline"))

    def test_empty_timeline(self) -> None:
        resp = self.client.get("/timeline")
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b"No milestones yet.", resp.data)

    def test_cards_alternate(self) -> None:
        first = self.create(title="Met")
        second = self.create(title="Moved in")
        html = self.client.get("/timeline").get_data(as_text=True)

        self.assertIn(f'class="card card-left" data-id="{first["id"]}"', html)
        self.assertIn(f'class="card card-right" data-id="{second["id"]}"', html)
        self.assertLess(html.index("Met"), html.index("Moved in"))

    def test_titles_are_escaped(self) -> None:
        self.create(title="<script>alert(1)</script>")
        html = self.client.get("/timeline").get_data(as_text=True)
        self.assertIn("&lt;script&gt;alert(1)&lt;/script&gt;", html)

    def test_message_page(self) -> None:
        event = self.create(title="Paris")
        self.client.put(f"/api/events/{event['id']}/message", json={"message": "Rain all week."})
        resp = self.client.get(f"/timeline/{event['id']}/message")
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b"Rain all week.", resp.data)

    def test_message_page_unknown_event(self) -> None:
        self.assertEqual(self.client.get("/timeline/404/message").status_code, 404)

    def test_status(self) -> None:
        resp = self.client.get("/status")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"status": "ok"})
