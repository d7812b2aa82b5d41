"""
One-time bootstrap script — creates the first global ADMIN user.

Usage:
    python -m caredata.scripts.create_admin

You only need this ONCE.  A global admin has no company; after it
exists, companies, segments and all other users are created through
the API.
"""

import asyncio
import getpass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from caredata.core.config import settings
from caredata.core.security import hash_password
from caredata.models.user import User, UserRole


async def create_admin() -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        # ── Collect input ────────────────────────────────────────────
        print("\nCare Data Manager — First Admin Setup\n")
        username = input("  Username:  ").strip()
        name = input("  Full name: ").strip()
        password = getpass.getpass("  Password:  ")
        confirm = getpass.getpass("  Confirm:   ")

        if password != confirm:
            print("\nPasswords do not match.")
            await engine.dispose()
            return

        if not username or not name or not password:
            print("\nAll fields are required.")
            await engine.dispose()
            return

        # ── Check for existing user ──────────────────────────────────
        existing = (
            await session.execute(select(User).where(User.username == username))
        ).scalar_one_or_none()

        if existing:
            print(f"\nUser '{username}' already exists.")
            await engine.dispose()
            return

        # ── Create the admin user (no company = global) ──────────────
        admin_user = User(
            name=name,
            username=username,
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
            company_id=None,
        )
        session.add(admin_user)
        await session.commit()

        print("\nGlobal admin created successfully!")
        print(f"    ID:       {admin_user.id}")
        print(f"    Username: {admin_user.username}")
        print("\n   You can now log in via POST /api/auth/login\n")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_admin())
