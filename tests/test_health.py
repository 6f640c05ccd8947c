"""API tests for the root discovery route, the health check and per-app database wiring."""

import os
import tempfile
import unittest

from fastapi.testclient import TestClient
from sqlalchemy import text

from notevault.core.config import Settings
from notevault.core.database import build_engine
from notevault.main import create_app
from support import FakeClock, make_client


class TestHealth(unittest.TestCase):
    def test_health_reports_database(self) -> None:
        client, _ = make_client(FakeClock())
        r = client.get("/api/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"status": "ok", "environment": "dev", "database": "connected"})

    def test_root_lists_endpoints(self) -> None:
        client, _ = make_client(FakeClock())
        body = client.get("/").json()
        self.assertEqual(body["status"], "running")
        self.assertEqual(body["endpoints"]["notes"], "/api/notes")


class TestDatabaseFromSettings(unittest.TestCase):
    """The app stores data in the database named by the settings it was created with."""

    def test_app_uses_configured_database_url(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        url = f"sqlite:///{os.path.join(tmpdir.name, 'notes.db')}"
        app = create_app(Settings(DATABASE_URL=url, APP_ENV="dev"), clock=FakeClock())
        self.addCleanup(app.state.engine.dispose)

        with TestClient(app) as client:
            r = client.post(
                "/api/signup",
                json={"username": "carol", "email": "carol@x.com", "password": "Cc3#cccc"},
            )
            self.assertEqual(r.status_code, 200)

        other = build_engine(url)
        self.addCleanup(other.dispose)
        with other.connect() as conn:
            count = conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
        self.assertEqual(count, 1)


if __name__ == "__main__":
    unittest.main()
