#!/usr/bin/env python3
"""
Seed script to create the demo menu and an admin account
"""

import asyncio
import uuid

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ADMIN_EMAIL = "admin@manziz.com"
ADMIN_PASSWORD = "manziz-admin"


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from storefront.database import SessionLocal, engine, Base
    from storefront.models.menu import MenuItem
    from storefront.models.user import User
    from storefront.services.content import SAMPLE_MENU

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if the admin already exists
        result = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating admin user...")

        admin = User(
            id=uuid.uuid4(),
            email=ADMIN_EMAIL,
            hashed_password=pwd_context.hash(ADMIN_PASSWORD),
            full_name="Manziz Admin",
            phone_number="+256 784 811 208",
            is_admin=True,
            is_active=True,
        )
        db.add(admin)

        print("Creating menu items...")

        # Same dishes the storefront shows when the database is unreachable
        menu_items = [
            MenuItem(
                id=uuid.uuid4(),
                name=sample.name,
                description=sample.description,
                image_url=sample.image_url,
                category=sample.category,
                price=sample.price,
                is_available=True,
                is_favorite=sample.is_favorite,
                tags=list(sample.tags),
            )
            for sample in SAMPLE_MENU
        ]
        db.add_all(menu_items)

        await db.commit()

        print(f"""
Demo data created successfully!

  Admin:
    Email: {ADMIN_EMAIL}
    Password: {ADMIN_PASSWORD}

Menu: {len(menu_items)} items created
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
