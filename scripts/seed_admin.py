#!/usr/bin/env python
"""Seed the first admin user.

Usage:
    python scripts/seed_admin.py --email admin@example.com --password "secure_password123" --name "Admin"
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from estates.core.password import hash_password
from estates.persistence.database import AsyncSessionLocal, engine
from estates.persistence.models.user import UserRole
from estates.persistence.repositories.user_repository import UserRepository


async def seed_admin(email: str, password: str, name: str) -> None:
    """Create the admin user unless one with that email exists."""
    email = email.strip().lower()
    async with AsyncSessionLocal() as session:
        user_repo = UserRepository(session)
        existing = await user_repo.get_by_email(email)
        if existing:
            print(f"User already exists: {email} (role={existing.role})")
            return

        await user_repo.create(
            name=name,
            email=email,
            hashed_password=hash_password(password),
            role=UserRole.ADMIN,
            is_active=True,
        )
        print(f"Created admin user: {email}")
        print("Please change this password after first login!")
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the first admin user")
    parser.add_argument("--email", required=True, help="Admin email")
    parser.add_argument("--password", required=True, help="Admin password")
    parser.add_argument("--name", default="Admin", help="Display name")
    args = parser.parse_args()

    asyncio.run(seed_admin(args.email, args.password, args.name))
