"""
Seed the demo accounts (admin, Tom, Jerry) and the admin welcome note. Idempotent:

  python -m notevault.scripts.seed_demo
"""

import logging
import sys

from sqlalchemy.orm import Session

from notevault.core.clock import utcnow
from notevault.core.database import SessionLocal, init_db
from notevault.core.security import hash_password
from notevault.models import Note, User
from notevault.services.access_policy import ADMIN, USER

logger = logging.getLogger(__name__)

DEMO_USERS = (
    ("admin", "admin@me.com", "Admin@123", ADMIN),
    ("Tom", "tom@me.com", "Tom@pass123", USER),
    ("Jerry", "jerry@me.com", "Jerry@pass123", USER),
)
WELCOME_NOTE = "1. Welcome to ADMIN ACCOUNT."


def seed(db: Session) -> tuple[int, int]:
    """Insert missing demo users and the welcome note; returns (users_added, notes_added)."""
    users_added = 0
    for username, email, password, role in DEMO_USERS:
        if db.query(User.id).filter(User.email == email).first() is not None:
            continue
        db.add(
            User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=role,
                failed_login_count=0,
            )
        )
        users_added += 1

    notes_added = 0
    if db.query(Note.id).filter(Note.title == WELCOME_NOTE).first() is None:
        now = utcnow()
        db.add(
            Note(
                title=WELCOME_NOTE,
                content=WELCOME_NOTE,
                created_by="admin",
                created_at=now,
                updated_at=now,
            )
        )
        notes_added = 1
    db.commit()
    return users_added, notes_added


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    init_db()
    db = SessionLocal()
    try:
        users_added, notes_added = seed(db)
        logger.info("Seed completed: users_added=%s notes_added=%s", users_added, notes_added)
        return 0
    except Exception as e:
        logger.exception("Seed failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
