"""API tests for note CRUD/search: token + identity gate and role/ownership scoping."""

import unittest

from notevault.models import User
from support import FakeClock, add_user, login, make_client


class NotesApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.client, self.session_factory = make_client(self.clock, RATE_LIMIT_LOGIN_MAX=100)
        add_user(self.session_factory, "admin", "admin@me.com", "Admin@123", role="admin")
        add_user(self.session_factory, "Tom", "tom@me.com", "Tom@pass123")
        add_user(self.session_factory, "Jerry", "jerry@me.com", "Jerry@pass123")
        self.tokens = {
            "admin": login(self.client, "admin@me.com", "Admin@123")["csrfToken"],
            "Tom": login(self.client, "tom@me.com", "Tom@pass123")["csrfToken"],
            "Jerry": login(self.client, "jerry@me.com", "Jerry@pass123")["csrfToken"],
        }

    def _headers(self, who: str) -> dict[str, str]:
        return {"X-CSRF-Token": self.tokens[who]}

    def _create(self, who: str, title: str, content: str = "body", role: str = "user") -> int:
        r = self.client.post(
            "/api/notes",
            json={"title": title, "content": content, "role": role, "username": who},
            headers=self._headers(who),
        )
        self.assertEqual(r.status_code, 200, r.json())
        return r.json()["noteId"]

    def _params(self, who: str, role: str = "user") -> dict[str, str]:
        return {"role": role, "username": who}


class TestProtection(NotesApiTestCase):
    def test_missing_token(self) -> None:
        r = self.client.get("/api/notes", params=self._params("Tom"))
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["reason"], "missing")

    def test_invalid_role(self) -> None:
        r = self.client.get("/api/notes", params={"role": "root", "username": "Tom"},
                            headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Invalid or missing role")

    def test_missing_identity_is_session_expired(self) -> None:
        r = self.client.get("/api/notes", params={"role": "user"}, headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 401)
        self.assertTrue(r.json()["sessionExpired"])

    def test_unknown_identity_is_session_expired(self) -> None:
        r = self.client.get("/api/notes", params=self._params("Ghost"), headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 401)

    def test_token_bound_to_other_identity(self) -> None:
        r = self.client.get("/api/notes", params=self._params("Jerry"), headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["reason"], "mismatch")
        r = self.client.get(
            "/api/notes",
            params={"role": "user", "email": "jerry@me.com"},
            headers=self._headers("Tom"),
        )
        self.assertEqual(r.json()["reason"], "mismatch")

    def test_expired_token(self) -> None:
        self.clock.advance(hours=1)
        r = self.client.get("/api/notes", params=self._params("Tom"), headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["reason"], "expired")

    def test_locked_account_is_forbidden(self) -> None:
        for _ in range(3):
            login(self.client, "tom@me.com", "Wrong@pass1")
        self.clock.advance(minutes=1)
        r = self.client.get("/api/notes", params=self._params("Tom"), headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 403)
        self.assertTrue(r.json()["accountLocked"])
        self.assertEqual(r.json()["minutesLeft"], 4)

    def test_foreign_token_does_not_reach_lock_state(self) -> None:
        for _ in range(3):
            login(self.client, "jerry@me.com", "Wrong@pass1")
        r = self.client.get("/api/notes", params=self._params("Jerry"), headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["reason"], "mismatch")
        self.assertNotIn("accountLocked", r.json())
        self.assertNotIn("minutesLeft", r.json())

        self.clock.advance(minutes=6)
        r = self.client.get("/api/notes", params=self._params("Jerry"), headers=self._headers("Tom"))
        self.assertEqual(r.json()["reason"], "mismatch")
        db = self.session_factory()
        try:
            jerry = db.query(User).filter(User.username == "Jerry").one()
            self.assertIsNotNone(jerry.locked_until)
            self.assertEqual(jerry.failed_login_count, 3)
        finally:
            db.close()


class TestScoping(NotesApiTestCase):
    def test_user_lists_only_own_notes_and_admin_lists_all(self) -> None:
        self._create("Tom", "tom note")
        self.clock.advance(seconds=1)
        self._create("Jerry", "jerry note")

        r = self.client.get("/api/notes", params=self._params("Tom"), headers=self._headers("Tom"))
        self.assertEqual([n["title"] for n in r.json()], ["tom note"])

        r = self.client.get(
            "/api/notes", params=self._params("admin", role="admin"), headers=self._headers("admin")
        )
        self.assertEqual([n["title"] for n in r.json()], ["jerry note", "tom note"])

    def test_get_single_note(self) -> None:
        note_id = self._create("Tom", "mine")
        r = self.client.get(f"/api/notes/{note_id}", params=self._params("Tom"),
                            headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["created_by"], "Tom")

        r = self.client.get(f"/api/notes/{note_id}", params=self._params("Jerry"),
                            headers=self._headers("Jerry"))
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["error"], "Access denied")

    def test_not_found_and_bad_id(self) -> None:
        r = self.client.get("/api/notes/999", params=self._params("Tom"), headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 404)
        r = self.client.get("/api/notes/abc", params=self._params("Tom"), headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Invalid note ID")

    def test_update_own_and_admin_any(self) -> None:
        note_id = self._create("Tom", "draft")
        r = self.client.put(
            f"/api/notes/{note_id}",
            json={"title": "hijack", "content": "x", "role": "user", "username": "Jerry"},
            headers=self._headers("Jerry"),
        )
        self.assertEqual(r.status_code, 403)

        r = self.client.put(
            f"/api/notes/{note_id}",
            json={"title": "final", "content": "done", "role": "user", "username": "Tom"},
            headers=self._headers("Tom"),
        )
        self.assertEqual(r.json(), {"message": "Note updated", "changes": 1})

        r = self.client.put(
            f"/api/notes/{note_id}",
            json={"title": "moderated", "content": "by admin", "role": "admin", "username": "admin"},
            headers=self._headers("admin"),
        )
        self.assertEqual(r.status_code, 200)
        r = self.client.get(f"/api/notes/{note_id}", params=self._params("Tom"),
                            headers=self._headers("Tom"))
        self.assertEqual(r.json()["title"], "moderated")
        self.assertEqual(r.json()["created_by"], "Tom")

    def test_create_requires_title_and_content(self) -> None:
        r = self.client.post(
            "/api/notes",
            json={"title": "   ", "content": "x", "role": "user", "username": "Tom"},
            headers=self._headers("Tom"),
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Title and content are required")

    def test_wrong_typed_title_is_bad_request(self) -> None:
        r = self.client.post(
            "/api/notes",
            json={"title": 5, "content": "x", "role": "user", "username": "Tom"},
            headers=self._headers("Tom"),
        )
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.json()["success"])
        self.assertTrue(r.json()["error"].startswith("title: "))

    def test_long_fields_are_truncated(self) -> None:
        note_id = self._create("Tom", "t" * 300, "c" * 6000)
        r = self.client.get(f"/api/notes/{note_id}", params=self._params("Tom"),
                            headers=self._headers("Tom"))
        self.assertEqual(len(r.json()["title"]), 200)
        self.assertEqual(len(r.json()["content"]), 5000)

    def test_delete(self) -> None:
        note_id = self._create("Tom", "temp")
        r = self.client.delete(f"/api/notes/{note_id}", params=self._params("Jerry"),
                               headers=self._headers("Jerry"))
        self.assertEqual(r.status_code, 403)
        r = self.client.delete(f"/api/notes/{note_id}", params=self._params("Tom"),
                               headers=self._headers("Tom"))
        self.assertEqual(r.json(), {"message": "Note deleted", "deletedCount": 1})
        r = self.client.get(f"/api/notes/{note_id}", params=self._params("Tom"),
                            headers=self._headers("Tom"))
        self.assertEqual(r.status_code, 404)

    def test_search_is_scoped(self) -> None:
        self._create("Tom", "Shopping List", "milk")
        self._create("Jerry", "Cheese plan", "shopping for cheese")
        r = self.client.get("/api/notes/search/shopping", params=self._params("Tom"),
                            headers=self._headers("Tom"))
        self.assertEqual([n["title"] for n in r.json()], ["Shopping List"])
        r = self.client.get("/api/notes/search/shopping", params=self._params("admin", role="admin"),
                            headers=self._headers("admin"))
        self.assertEqual(len(r.json()), 2)


class TestClientAssertedRole(NotesApiTestCase):
    """With TRUST_CLIENT_ROLE disabled the stored role is used instead of the asserted one."""

    def setUp(self) -> None:
        super().setUp()
        self._create("Jerry", "private")
        self.client.app.state.settings = self.client.app.state.settings.model_copy(
            update={"TRUST_CLIENT_ROLE": False}
        )

    def test_user_cannot_claim_admin(self) -> None:
        r = self.client.get("/api/notes", params=self._params("Tom", role="admin"),
                            headers=self._headers("Tom"))
        self.assertEqual(r.json(), [])


if __name__ == "__main__":
    unittest.main()
