#!/usr/bin/env python3
"""
Seed script to create a demo floor plan and staff accounts
"""

import asyncio

from passlib.context import CryptContext
from sqlalchemy import select

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# (table number, seats)
FLOOR_PLAN = [
    ("T01", 2),
    ("T02", 2),
    ("T03", 4),
    ("T04", 4),
    ("T05", 4),
    ("T06", 6),
    ("T07", 8),
    ("T08", 12),
]


async def seed_demo_data():
    """Seed demo data for development"""
    from pos_app.database import SessionLocal, engine, Base
    from pos_app.models import Table, TableStatus, User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        result = await db.execute(select(Table).where(Table.table_number == FLOOR_PLAN[0][0]))
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating floor plan...")

        for table_number, capacity in FLOOR_PLAN:
            db.add(Table(table_number=table_number, capacity=capacity, status=TableStatus.AVAILABLE))

        db.add(User(
            email="admin@pos.local",
            hashed_password=pwd_context.hash("admin123"),
            full_name="Floor Manager",
            role=UserRole.ADMIN,
            is_active=True,
        ))
        db.add(User(
            email="host@pos.local",
            hashed_password=pwd_context.hash("host123"),
            full_name="Front Desk Host",
            role=UserRole.STAFF,
            is_active=True,
        ))

        await db.commit()

        print(f"""
Demo data created successfully!

Tables: {len(FLOOR_PLAN)} created ({", ".join(number for number, _ in FLOOR_PLAN)})

Users:
  Admin:
    Email: admin@pos.local
    Password: admin123

  Staff:
    Email: host@pos.local
    Password: host123
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
