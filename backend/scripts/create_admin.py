"""
Create an admin account, or promote an existing one.

Usage:
    python scripts/create_admin.py <email> <username> [password]

Without a password argument the script prompts for one.
"""

import sys
import os
import getpass
sys.path.append(os.getcwd())

from newsflow.core.config import settings
from newsflow.core.security import hash_password
from newsflow.schemas import UserCreate
from newsflow.storage import SQLStorage


def create_admin(email: str, username: str, password: str) -> None:
    storage = SQLStorage(settings.SQLALCHEMY_DATABASE_URI)
    storage.init_db()
    try:
        existing = storage.get_user_by_email(email)
        if existing:
            storage.set_user_admin_status(existing.id, True)
            print(f"Promoted existing user {existing.username} (id {existing.id}) to admin.")
            return

        if storage.get_user_by_username(username):
            print(f"[FAIL] Username '{username}' is taken by another email.")
            sys.exit(1)

        user = storage.create_user(UserCreate(
            username=username,
            email=email,
            password=hash_password(password),
            is_admin=True,
        ))
        print(f"Created admin {user.username} (id {user.id}).")
    finally:
        storage.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    pw = sys.argv[3] if len(sys.argv) > 3 else getpass.getpass("Password: ")
    if len(pw) < 8:
        print("[FAIL] Password must be at least 8 characters.")
        sys.exit(1)
    create_admin(sys.argv[1], sys.argv[2], pw)
