"""Test environment: in-memory SQLite and cheap bcrypt rounds, set before the app is imported."""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
