"""
Create a user (e.g. the first admin). Run from project root:
  python -m notevault.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m notevault.scripts.create_user admin admin@me.com 'Admin@123' admin
"""
import argparse
import sys

from notevault.core.database import SessionLocal
from notevault.core.security import (
    hash_password,
    is_valid_email,
    is_valid_username,
    normalize_email,
    password_problems,
)
from notevault.models.user import User
from notevault.services.access_policy import ROLES, USER


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a NoteVault user.")
    parser.add_argument("username", help="Username (3-30 chars: letters, numbers, _ or -)")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("password", help="Password (8+ chars, mixed case, number, special)")
    parser.add_argument("role", nargs="?", default=USER, choices=list(ROLES))
    args = parser.parse_args(argv)

    username = args.username.strip()
    email = normalize_email(args.email)
    if not is_valid_username(username):
        print("Invalid username.", file=sys.stderr)
        return 1
    if not is_valid_email(email):
        print("Invalid email address.", file=sys.stderr)
        return 1
    problems = password_problems(args.password)
    if problems:
        print(f"Password must contain: {', '.join(problems)}.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = (
            db.query(User)
            .filter((User.email == email) | (User.username == username))
            .first()
        )
        if existing:
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(args.password),
            role=args.role,
            failed_login_count=0,
        )
        db.add(user)
        db.commit()
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
