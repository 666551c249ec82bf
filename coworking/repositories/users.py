"""User repository helpers."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


async def get_by_id(session: AsyncSession, user_id: str) -> User | None:
    """Return a user by identifier."""

    return await session.get(User, user_id)


async def list_admin_ids(session: AsyncSession) -> list[str]:
    """Return identifiers of every admin user, oldest first."""

    stmt = select(User.id).where(User.is_admin.is_(True)).order_by(User.created_at.asc(), User.id.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())
