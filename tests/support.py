"""Shared helpers for API tests: a controllable clock and an isolated app + database."""

from datetime import datetime, timedelta, timezone

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from notevault.core.config import Settings
from notevault.core.database import init_db
from notevault.core.security import hash_password
from notevault.main import create_app
from notevault.models import User


class FakeClock:
    """Callable clock that only moves when advance() is called."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_app(
    clock: FakeClock,
    database_url: str = "sqlite://",
    **overrides: object,
) -> tuple[FastAPI, sessionmaker]:
    """Build an app wired to a fresh database (in-memory by default) and the given clock."""
    settings = Settings(DATABASE_URL=database_url, **overrides)
    app = create_app(settings, clock=clock)
    init_db(app.state.engine)
    return app, app.state.session_factory


def make_client(clock: FakeClock, **overrides: object) -> tuple[TestClient, sessionmaker]:
    app, session_factory = make_app(clock, **overrides)
    return TestClient(app), session_factory


def add_user(
    session_factory: sessionmaker,
    username: str,
    email: str,
    password: str,
    role: str = "user",
) -> int:
    """Insert a user directly (bypassing the signup rate limit); returns its id."""
    db = session_factory()
    try:
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=role,
            failed_login_count=0,
        )
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def login(client: TestClient, email: str, password: str) -> dict:
    return client.post("/api/login", json={"email": email, "password": password}).json()
