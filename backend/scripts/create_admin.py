"""Create an admin account or promote an existing user.

Admin rights are never granted through the API; run this once per admin:

    python scripts/create_admin.py --username alice --password 's3cret'
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.append(str(BASE_DIR))

import watched.models  # noqa: E402,F401
from watched.core.security import hash_password  # noqa: E402
from watched.db.session import SessionLocal  # noqa: E402
from watched.models.user import User  # noqa: E402
from watched.services.users import find_user_by_username  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote a Watched admin account")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", help="Required when the user does not exist yet")
    parser.add_argument("--email")
    parser.add_argument("--full-name")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    db = SessionLocal()
    try:
        user = find_user_by_username(db, args.username)
        if user:
            if user.is_admin:
                print(f"{user.username} is already an admin.")
                return 0
            user.is_admin = True
            db.add(user)
            db.commit()
            print(f"Promoted {user.username} to admin.")
            return 0

        if not args.password:
            print("User not found. Pass --password to create it.")
            return 1
        user = User(
            username=args.username,
            password_hash=hash_password(args.password),
            email=args.email,
            full_name=args.full_name,
            is_admin=True,
        )
        db.add(user)
        db.commit()
        print(f"Created admin {user.username} (id={user.id}).")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
