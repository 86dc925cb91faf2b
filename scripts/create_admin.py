#!/usr/bin/env python3
"""
Create (or reset the password of) an admin account.

Usage:
    python scripts/create_admin.py --email admin@example.com --password secret123 [--name "Portal Admin"]
"""

import argparse
import asyncio
import os
import sys

from sqlalchemy import select

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from portal.core.logging import setup_logging
from portal.core.security import Role, get_password_hash
from portal.db.session import AsyncSessionLocal, engine
from portal.models.user import User


async def create_admin(email: str, password: str, name: str) -> None:
    email = email.strip().lower()
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is not None and user.role != Role.ADMIN.value:
            raise SystemExit(f"{email} already belongs to a {user.role} account")

        if user is None:
            user = User(email=email, name=name, role=Role.ADMIN.value)
            db.add(user)
            action = "Created"
        else:
            action = "Updated"

        user.password_hash = get_password_hash(password)
        user.is_active = True
        await db.commit()
        print(f"{action} admin {email}")

    await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create or update an admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Portal Admin")
    args = parser.parse_args()

    if len(args.password) < 6:
        parser.error("password must be at least 6 characters")

    setup_logging()
    asyncio.run(create_admin(args.email, args.password, args.name))


if __name__ == "__main__":
    main()
