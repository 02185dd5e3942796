"""
Create the platform admin account if it does not exist yet.

    ADMIN_EMAIL=... ADMIN_PASSWORD=... python seed_admin.py
"""

import logging
import os
import sys

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from auth import hash_password
from database import create_document, ensure_indexes, get_db
from schemas import User as UserSchema

logger = logging.getLogger("artfolio.seed")


class SeedConflict(Exception):
    """The admin username already belongs to a different account."""


def seed_admin(db: Database, email: str, username: str, password: str) -> bool:
    """Return True if a new admin was created, False if the email was already taken.

    Raises SeedConflict when another account already uses the username.
    """
    email = email.lower()
    username = username.strip()
    ensure_indexes(db)
    existing = db["user"].find_one({"$or": [{"email": email}, {"username": username}]})
    if existing:
        if existing.get("email") != email:
            raise SeedConflict(f"Username {username!r} is already used by another account")
        logger.info("Account %s already exists with role %s", email, existing.get("role"))
        return False
    admin = UserSchema(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role="admin",
        bio="Platform Administrator",
    )
    try:
        create_document(db, "user", admin)
    except DuplicateKeyError:
        raise SeedConflict(f"Email {email} or username {username!r} was registered concurrently")
    logger.info("Admin account %s created", email)
    return True


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    username = os.getenv("ADMIN_USERNAME", "admin")
    if not email or not password:
        logger.error("ADMIN_EMAIL and ADMIN_PASSWORD must be set")
        return 1
    try:
        created = seed_admin(get_db(), email, username, password)
    except SeedConflict as e:
        logger.error("%s", e)
        return 1
    print("Admin account created" if created else "Admin account already exists")
    return 0


if __name__ == "__main__":
    sys.exit(main())
