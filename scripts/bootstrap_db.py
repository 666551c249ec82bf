"""Create database schema and seed sample offices for development."""
from __future__ import annotations

import asyncio

from coworking.db.session import SessionLocal, engine
from coworking.models.base import Base, utcnow
from coworking.models.office import ApprovalStatus, Office
from coworking.models.tag import Tag
from coworking.models.user import User
from coworking.repositories import offices as offices_repo

USERS = [
    {"id": "user-admin", "name": "Moderator", "email": "admin@example.com", "is_admin": True},
    {"id": "user-host-lina", "name": "Lina Haddad", "email": "lina@example.com", "is_admin": False},
    {"id": "user-visitor-omar", "name": "Omar Farouk", "email": "omar@example.com", "is_admin": False},
]

TAGS = [
    {"id": "tag-wifi", "name": "Fast Wi-Fi"},
    {"id": "tag-parking", "name": "Parking"},
    {"id": "tag-meeting-room", "name": "Meeting room"},
]

OFFICES = [
    {
        "id": "office-harbour-loft",
        "user_id": "user-host-lina",
        "title": "Harbour Loft",
        "description": "Quiet loft with harbour views and standing desks.",
        "lat": 25.2048,
        "lng": 55.2708,
        "address_line1": "12 Marina Walk",
        "price_per_day": 4500,
        "monthly_discount": 10,
        "approval_status": ApprovalStatus.APPROVED,
        "tags": ["tag-wifi", "tag-meeting-room"],
    },
    {
        "id": "office-garden-studio",
        "user_id": "user-host-lina",
        "title": "Garden Studio",
        "description": "Ground floor studio opening onto a shared garden.",
        "lat": 25.1972,
        "lng": 55.2744,
        "address_line1": "4 Palm Street",
        "price_per_day": 3000,
        "monthly_discount": 0,
        "approval_status": ApprovalStatus.PENDING,
        "tags": ["tag-parking"],
    },
]


async def create_schema() -> None:
    """Create the database schema if it does not already exist."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_users_and_tags() -> None:
    async with SessionLocal() as session:
        async with session.begin():
            for user_data in USERS:
                user = await session.get(User, user_data["id"])
                if user is None:
                    session.add(User(**user_data, created_at=utcnow()))
                else:
                    user.name = user_data["name"]
                    user.email = user_data["email"]
                    user.is_admin = user_data["is_admin"]

            for tag_data in TAGS:
                tag = await session.get(Tag, tag_data["id"])
                if tag is None:
                    session.add(Tag(**tag_data))
                else:
                    tag.name = tag_data["name"]


async def seed_offices() -> None:
    """Insert or update demo offices and their tags."""

    async with SessionLocal() as session:
        async with session.begin():
            for office_data in OFFICES:
                data = dict(office_data)
                tag_ids = data.pop("tags")
                office = await session.get(Office, data["id"])
                if office is None:
                    now = utcnow()
                    office = Office(**data, created_at=now, updated_at=now)
                    session.add(office)
                else:
                    for field, value in data.items():
                        setattr(office, field, value)
                    office.updated_at = utcnow()
                await session.flush()
                await offices_repo.replace_tags(session, office.id, tag_ids)


async def main() -> None:
    await create_schema()
    await seed_users_and_tags()
    await seed_offices()
    print("Database schema ensured and demo data seeded.")


if __name__ == "__main__":
    asyncio.run(main())
